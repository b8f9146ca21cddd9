"""FastAPI application entrypoint for the basket pricing calculator.

Maps pricing errors to HTTP status codes and logs every request.

To run: uvicorn main:app --reload
"""
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid
from redis import RedisError

from pricing_calculator.api.dependencies import get_price_source
from pricing_calculator.api.routes import router
from pricing_calculator.core.config import settings
from pricing_calculator.core.errors import (
    ArticleNotFoundError,
    BasketValidationError,
    ErrorResponse,
    GENERIC_ERROR_MESSAGE,
    PricingError,
)
from pricing_calculator.core.logging import get_logger, setup_logging
from pricing_calculator.domain.sources import PriceSource
from pricing_calculator.infrastructure.redis import RedisPriceRepository

# Initialize structured logging
log_format = settings.environment == "production"
setup_logging(level=settings.log_level, json_format=log_format)
logger = get_logger(__name__)

# Application metadata
APP_VERSION = "1.0.0"
APP_NAME = "Basket Pricing Calculator"

app = FastAPI(
    title=APP_NAME,
    description="Prices baskets of articles, applying per-customer discounts",
    version=APP_VERSION,
    docs_url="/docs" if settings.environment != "production" else None,  # Disable in prod
    redoc_url="/redoc" if settings.environment != "production" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump()
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Middleware to log all requests with timing and status code."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    request_logger = get_logger(__name__, {"request_id": request_id})

    start_time = time.time()

    request_logger.info(
        f"Request started: {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
        }
    )

    try:
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        request_logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            }
        )

        response.headers["X-Request-ID"] = request_id
        return response

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        request_logger.error(
            f"Request failed: {request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "duration_ms": round(duration_ms, 2),
                "error_type": type(e).__name__,
            },
            exc_info=True
        )
        # Internal details stay in the logs
        response = error_response(500, GENERIC_ERROR_MESSAGE)
        response.headers["X-Request-ID"] = request_id
        return response


def pricing_error_response(request: Request, exc: PricingError, status_code: int) -> JSONResponse:
    request_logger = get_logger(__name__, {"request_id": getattr(request.state, "request_id", None)})
    request_logger.warning(
        f"Pricing request rejected: {exc.message}",
        extra={"status_code": status_code, "error_type": type(exc).__name__}
    )
    return error_response(status_code, exc.message)


@app.exception_handler(BasketValidationError)
async def basket_validation_error_handler(request: Request, exc: BasketValidationError):
    """Return invalid baskets, including exceeded quantities, as 400."""
    return pricing_error_response(request, exc, 400)


@app.exception_handler(ArticleNotFoundError)
async def article_not_found_error_handler(request: Request, exc: ArticleNotFoundError):
    """Return articles without a price as 404."""
    return pricing_error_response(request, exc, 404)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Return malformed request bodies as 400 with the error shape."""
    errors = exc.errors()
    if not errors:
        return error_response(400, "Malformed request")

    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"Invalid value for {field}: {first.get('msg')}" if field else str(first.get("msg"))
    return error_response(400, message)


@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info("Application starting up", extra={"version": APP_VERSION})


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    logger.info("Application shutting down")


app.include_router(router)


@app.get("/")
def root():
    """Root endpoint with basic service info."""
    return {
        "service": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.environment
    }


@app.get("/health")
def health_check():
    """Liveness check. Returns 200 while the process is serving."""
    return {
        "status": "healthy",
        "version": APP_VERSION,
        "checks": {
            "api": "ok",
        }
    }


@app.get("/ready")
def readiness_check(price_source: PriceSource = Depends(get_price_source)):
    """Readiness check.

    Verifies the configuration and reports the price cache actually in use.
    When Redis was configured but unreachable at startup, prices live in
    process memory and the cache is reported as ``fallback_memory``.
    """
    checks = {"price_cache": "memory"}
    try:
        settings.validate_required_settings()
        checks["config"] = "ok"
    except ValueError:
        checks["config"] = "error"

    if isinstance(price_source, RedisPriceRepository):
        checks["price_cache"] = "redis"
        try:
            price_source.redis.ping()
            checks["redis"] = "ok"
        except RedisError:
            checks["redis"] = "unreachable"
    elif settings.price_cache_backend == "redis":
        checks["price_cache"] = "fallback_memory"

    all_ok = checks["config"] == "ok"

    return {
        "status": "ready" if all_ok else "degraded",
        "checks": checks
    }
