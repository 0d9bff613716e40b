"""
FastAPI Main Application

EstateDesk real-estate back-office REST API.
"""
import time
import uuid
from datetime import datetime, timezone
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import Settings
from src.estatedesk.api.dependencies import get_db, get_settings
from src.estatedesk.api.schemas import HealthCheck
from src.estatedesk.api.routers import agents, auth, calendar, deals, leads, properties, tasks
from src.estatedesk.db.session import health_check as database_health_check
from src.estatedesk.exceptions import EstateDeskError
from src.estatedesk.utils.logger import bind_request_context, get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

_settings = get_settings()

REQUEST_ID_HEADER = "X-Request-ID"

HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}

# Create FastAPI app
app = FastAPI(
    title="EstateDesk API",
    description="REST API for property listings, verification, leads, deals, tasks and scheduling",
    version=_settings.api_version,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag every log entry with the request id and log the outcome of the request."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    bind_request_context(request_id, request.method, request.url.path)

    started = time.perf_counter()
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        "request_completed",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


# Include routers
app.include_router(auth.router)
app.include_router(properties.router)
app.include_router(deals.router)
app.include_router(leads.router)
app.include_router(tasks.router)
app.include_router(agents.router)
app.include_router(calendar.router)


def error_response(status_code: int, message: str, error: str, headers=None) -> JSONResponse:
    """Render the failure envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": error},
        headers=headers,
    )


@app.exception_handler(EstateDeskError)
async def estatedesk_error_handler(request: Request, exc: EstateDeskError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return error_response(exc.status_code, exc.message, exc.error_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Request bodies and query parameters that fail validation become 400s."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    message = "; ".join(problems) or "Invalid request"

    logger.info("request_validation_failed", path=request.url.path, errors=len(problems))
    return error_response(400, message, "bad_request")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        "database_error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return error_response(500, "Database error", "internal")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep the status code and headers (WWW-Authenticate) inside the common envelope."""
    if exc.status_code >= 500:
        logger.error("http_error", path=request.url.path, status_code=exc.status_code, detail=exc.detail)
    return error_response(
        exc.status_code,
        str(exc.detail),
        HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
    )
    return error_response(500, "Internal server error", "internal")


@app.get("/health", response_model=HealthCheck, tags=["health"])
def health_check(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """
    Health check endpoint.

    Returns:
        Health status with database connectivity check
    """
    database_ok = database_health_check(db)

    return HealthCheck(
        status="healthy" if database_ok else "degraded",
        version=settings.api_version,
        database="connected" if database_ok else "unavailable",
        timestamp=datetime.now(timezone.utc),
    )


@app.get("/", tags=["root"])
def root(settings: Settings = Depends(get_settings)):
    """
    Root endpoint.

    Returns:
        API information
    """
    return {
        "name": "EstateDesk API",
        "version": settings.api_version,
        "docs": "/docs",
        "health": "/health",
        "features": [
            "JWT Authentication",
            "Property Verification",
            "Document Review",
            "Lead and Deal Pipeline",
            "Tasks and Calendar",
        ]
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.estatedesk.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.debug,
    )
