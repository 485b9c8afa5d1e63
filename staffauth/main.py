"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from staffauth.api.v1 import build_router
from staffauth.core.config import Settings, get_settings
from staffauth.schemas.user import ApiResponse
from staffauth.services.errors import UserServiceError

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("staffauth.access")


def _error_response(status_code: int, data: dict) -> JSONResponse:
    body = ApiResponse(status=status_code, message="error", data=data)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


async def handle_service_error(request: Request, exc: UserServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, {"error": exc.message})


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        {"error": "invalid request", "details": jsonable_encoder(exc.errors())},
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, {"error": str(exc.detail)})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s raised an unhandled error", request.method, request.url.path, exc_info=exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, {"error": "internal server error"})


async def log_requests(request: Request, call_next):
    """Access log line per request: method, path, status, latency."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    access_logger.info(
        "%s %s -> %s (%.1fms) client=%s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request.client.host if request.client else "-",
    )
    return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; settings decide CORS and which user routes are mounted."""
    settings = settings or get_settings()
    app = FastAPI(
        title="Staff Auth API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(UserServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(build_router(settings.USER_ADMIN_ROUTES_ENABLED))

    @app.get("/api-1")
    def api_1() -> dict[str, str]:
        return {"success": "Access granted for api-1"}

    @app.get("/api-2")
    def api_2() -> dict[str, str]:
        return {"success": "Access granted for api-2"}

    return app


app = create_app()
