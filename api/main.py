"""
FastAPI application initialization
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from api.routes import admin, auth, china_team, customer, ghana_team, health, reference
from core.config import settings, validate_config
from core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    CustomerNotFoundError,
    DuplicateEmailError,
    PermissionDeniedError,
    RecordNotFoundError,
    ServiceError,
    TrackerException,
    ValidationError,
)
from core.logging import setup_logging
from schemas.api import ErrorResponse
import logging
from api.middleware import RequestContextMiddleware

# Configure logging
setup_logging()

logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS_CODES = [
    (DuplicateEmailError, 409),
    (CustomerNotFoundError, 404),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (PermissionDeniedError, 403),
    (RecordNotFoundError, 404),
    (ConfigurationError, 503),
    (ServiceError, 502),
]

SERVICE_ERROR_MESSAGE = "A hosted service request failed. Please try again."


def status_code_for(exc: TrackerException) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 500


# Create FastAPI app
app = FastAPI(
    title="AFREQ Logistics Tracking API",
    description="China-to-Ghana shipment tracking for admins, warehouse teams and customers",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TrackerException)
async def tracker_exception_handler(request: Request, exc: TrackerException):
    status_code = status_code_for(exc)
    request_id = getattr(request.state, "request_id", None)

    if status_code >= 500:
        logger.error(
            f"[{request_id}] {request.method} {request.url.path} failed: {exc.message}",
            extra={"error_context": exc.to_dict()}
        )
    else:
        logger.warning(f"[{request_id}] {request.method} {request.url.path} -> {status_code}: {exc.message}")

    # Not-found messages name what was missing and are shown as-is
    if isinstance(exc, ServiceError) and not isinstance(exc, RecordNotFoundError):
        body = ErrorResponse(error=SERVICE_ERROR_MESSAGE, detail=exc.message)
    else:
        body = ErrorResponse(error=exc.message)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    body = ErrorResponse(error="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


# Include routers
app.include_router(health.router)
app.include_router(reference.router)
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(china_team.router)
app.include_router(ghana_team.router)
app.include_router(customer.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting AFREQ Logistics Tracking API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    is_valid, missing = validate_config()
    if not is_valid:
        logger.warning(f"Missing required configuration: {', '.join(missing)}")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down AFREQ Logistics Tracking API")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "AFREQ Logistics Tracking API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "auth": "/auth",
            "admin": "/admin",
            "chinaTeam": "/china-team",
            "ghanaTeam": "/ghana-team",
            "customer": "/customer",
            "reference": "/reference"
        }
    }
