import uvicorn as uvicorn
from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException
import redis.asyncio as redis
import logging

from src.config.settings import settings
from src.config.database import startDB
from src.commonUtils.errors import StoreAppError, StoreError, from_schema_error
from src.crud.userService import ensure_admin_user
from src.routes import userRoute, productRoute, cartRoute, orderRoute

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Initialize FastAPI app with lifespan context
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize database connection and models (startup logic)
    client = await startDB()

    # One-shot, idempotent
    await ensure_admin_user()
    logger.info("✅ App initialized successfully!")

    # Initialize rate limiter
    if settings.RATE_LIMITING_ENABLED:
        redis_connection = redis.from_url(settings.REDIS_URL, encoding="utf-8")
        await FastAPILimiter.init(redis_connection)

    yield

    if settings.RATE_LIMITING_ENABLED:
        await FastAPILimiter.close()
    client.close()


def rate_limit(times: int, seconds: int) -> list:
    """Router dependencies for the limiter, empty when rate limiting is off"""
    if not settings.RATE_LIMITING_ENABLED:
        return []
    return [Depends(RateLimiter(times=times, seconds=seconds))]


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler that formats all errors consistently"""
    error_response = {
        "success": False,
        "message": "An error occurred",
        "error": {
            "type": exc.__class__.__name__,
            "detail": str(exc),
            "path": request.url.path,
        }
    }

    status_code = 500

    # Handle domain errors (400, 401, 403, 404)
    if isinstance(exc, StoreAppError) and not isinstance(exc, StoreError):
        status_code = exc.status_code
        error_response["message"] = exc.message
        error_response["error"]["detail"] = exc.message

    # Handle HTTP exceptions (404, 401, etc.)
    elif isinstance(exc, StarletteHTTPException):
        status_code = exc.status_code
        error_response["message"] = exc.detail if isinstance(exc.detail, str) else "Request failed"
        error_response["error"]["detail"] = exc.detail

    # Malformed or missing request fields are client errors like any other ValidationError
    elif isinstance(exc, RequestValidationError):
        status_code = 400
        error_response["message"] = from_schema_error(exc).message
        error_response["error"]["type"] = "ValidationError"
        error_response["error"]["detail"] = jsonable_encoder(exc.errors())

    # Log unexpected errors
    if status_code == 500:
        if isinstance(exc, (StoreError, PyMongoError)):
            logger.error(f"Store failure on {request.url.path}: {str(exc)}", exc_info=True)
        else:
            logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
        error_response["message"] = "Server Error"
        error_response["error"]["type"] = "StoreError"
        # Don't expose internal details
        error_response["error"]["detail"] = "Please contact support"

    return JSONResponse(
        status_code=status_code,
        content=error_response
    )


def create_app() -> FastAPI:
    app = FastAPI(
        lifespan=lifespan,
        docs_url=None if settings.ENVIRONMENT.lower() == "production" else "/docs",
        redoc_url=None if settings.ENVIRONMENT.lower() == "production" else "/redoc"
    )

    # Register the handler for all exceptions
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)
    app.add_exception_handler(StoreAppError, global_exception_handler)
    app.add_exception_handler(PyMongoError, global_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(productRoute.router, tags=['products'], prefix='/api/v1',
                       dependencies=rate_limit(100, 60))
    app.include_router(cartRoute.router, tags=['cart'], prefix='/api/v1',
                       dependencies=rate_limit(100, 60))
    app.include_router(orderRoute.router, tags=['orders'], prefix='/api/v1',
                       dependencies=rate_limit(100, 60))
    app.include_router(userRoute.router, prefix='/api/v1', dependencies=rate_limit(10, 60))

    @app.get("/api/healthchecker", dependencies=rate_limit(100, 60))
    def root():
        return {"message": f"Welcome to {settings.PLATFORM_NAME}"}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("src.main:app", host="0.0.0.0", port=5001, reload=True, log_level="info")
