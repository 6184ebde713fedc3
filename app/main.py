import logging
import sqlite3
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.core.config import ServerConfig, AttendanceConfig # Import configs
from app.core.database import init_database, seed_test_data # Import database functions
from app.core.exceptions import (
    AuthenticationError,
    ConcurrencyConflictError,
    NotFoundError,
    PunchVerificationError,
    ValidationError,
)
from app.api.endpoints import general, attendance, company, users, hr_profiles, employees, leaves, regularizations, dashboard, realtime # Import all endpoint routers
from app.services.company_service import get_company_config

# Configure logging
log_level = getattr(logging, ServerConfig.LOG_LEVEL.upper())
logging.basicConfig(level=log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("=" * 60)
    logger.info(f"🚀 {ServerConfig.APP_NAME.upper()}")
    logger.info(f"Version: {ServerConfig.APP_VERSION}")
    logger.info("=" * 60)

    # Initialize database
    init_database()

    # Add test data for development
    if ServerConfig.SEED_TEST_DATA:
        seed_test_data()

    # Company configuration singleton is created once here, before any punch arrives
    config = get_company_config()
    logger.info(f"Office WiFi: '{config.company_wifi}'")
    logger.info(
        f"Office location: ({config.office_location.latitude}, {config.office_location.longitude}), "
        f"radius {config.office_location.allowed_radius}m"
    )

    if not AttendanceConfig.WIFI_VERIFICATION_ENABLED:
        logger.warning("⚠️  WiFi verification is DISABLED - all networks allowed")
    if not AttendanceConfig.LOCATION_VERIFICATION_ENABLED:
        logger.warning("⚠️  Location verification is DISABLED - all positions allowed")
    logger.info(f"Half-day escalation after more than {AttendanceConfig.DISCONNECTION_THRESHOLD} disconnections")

    logger.info(f"Database: {ServerConfig.DATABASE_PATH}")
    logger.info("=" * 60)
    logger.info("HR Dashboard Server started successfully!")

    yield  # Server is running

    # Shutdown logic
    logger.info("Shutting down HR Dashboard Server...")


app = FastAPI(
    title=ServerConfig.APP_NAME,
    version=ServerConfig.APP_VERSION,
    description=ServerConfig.APP_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs" if ServerConfig.ENABLE_API_DOCS else None,
    redoc_url="/redoc" if ServerConfig.ENABLE_API_DOCS else None,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ServerConfig.CORS_ORIGINS,
    allow_credentials=ServerConfig.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(PunchVerificationError)
async def punch_verification_handler(request: Request, exc: PunchVerificationError):
    return JSONResponse(status_code=403, content={
        "verified": False,
        "message": "Attendance verification failed",
        "failures": exc.failures,
        "distance_meters": exc.distance_meters,
        "allowed_radius": exc.allowed_radius,
        "verification_status": {
            "wifi": exc.wifi_valid,
            "location": exc.location_valid,
        },
    })

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(ConcurrencyConflictError)
async def conflict_handler(request: Request, exc: ConcurrencyConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})

@app.exception_handler(sqlite3.Error)
async def storage_error_handler(request: Request, exc: sqlite3.Error):
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable, please retry"})

# Include API routers
app.include_router(general.router, tags=["General"])
app.include_router(users.router, tags=["Users"])
app.include_router(hr_profiles.router, tags=["HR Profiles"])
app.include_router(employees.router, tags=["Employees"])
app.include_router(leaves.router, tags=["Leaves"])
app.include_router(attendance.router, tags=["Attendance"])
app.include_router(regularizations.router, tags=["Regularization"])
app.include_router(company.router, tags=["Company"])
app.include_router(dashboard.router, tags=["Dashboard"])
app.include_router(realtime.router, tags=["Real-time"])
