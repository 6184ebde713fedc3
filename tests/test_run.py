import run


def test_server_runs_as_a_single_process():
    options = run.uvicorn_options()
    assert options["workers"] == 1
    assert options["port"] == run.ServerConfig.PORT
