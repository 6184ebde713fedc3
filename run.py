import uvicorn
import logging
from app.main import app # Import the FastAPI app instance from app.main
from app.core.config import ServerConfig # Import ServerConfig

# Configure logging for the main entry point
log_level = getattr(logging, ServerConfig.LOG_LEVEL.upper())
logging.basicConfig(level=log_level)
logger = logging.getLogger(__name__)

def uvicorn_options() -> dict:
    """Single-process server settings; WebSocket subscribers live in this process's memory"""
    return {
        "host": ServerConfig.HOST,
        "port": ServerConfig.PORT,
        "log_level": ServerConfig.LOG_LEVEL.lower(),
        "workers": 1,
    }

if __name__ == "__main__":
    logger.info(f"Starting HTTP server on port {ServerConfig.PORT}...")
    logger.info(f"API Documentation: http://localhost:{ServerConfig.PORT}/docs")
    logger.info(f"WebSocket endpoint: ws://localhost:{ServerConfig.PORT}/ws")

    uvicorn.run(app, **uvicorn_options())
