"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.api.v1.router import api_router
from app.api.deps import get_db
from app.core.config import settings
from app.core.constants import INVALID_PAYLOAD_MESSAGE
from app.core.exceptions import RollcallError
from app.core.rate_limit import limiter
from app.core.logging_config import setup_logging, get_logger
from app.db import init_db
from app.middleware import LoggingMiddleware

setup_logging(level=settings.LOG_LEVEL)
logger = get_logger(__name__)

if settings.ENVIRONMENT == "production":
    settings.validate_production_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "application_starting",
        app_title=settings.APP_TITLE,
        app_version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )
    if settings.DB_CREATE_TABLES:
        init_db()
    yield
    logger.info("application_stopping")


app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RollcallError)
async def rollcall_error_handler(request: Request, exc: RollcallError):
    """Render service errors as {"error": message} with their HTTP status."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log("request_rejected", error_code=exc.error_code, error=exc.message, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are a client error (400), reported in the same shape."""
    details = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    ]
    logger.info("request_invalid", details=details)
    return JSONResponse(status_code=400, content={"error": INVALID_PAYLOAD_MESSAGE, "details": details})


# Must be added before other middleware for proper request tracking
app.add_middleware(LoggingMiddleware)


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-API-Version"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check for load balancers and scanner apps.

    Returns 503 if the database is unreachable, since no check-in can be
    recorded without it.
    """
    health_status = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "database": {"status": "connected"},
    }

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = f"error: {str(e)}"
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
