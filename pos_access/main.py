import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.router import api_router
from .core.config import get_settings
from .core.logging import configure_logging
from .services.backends import RemoteServiceError

logger = logging.getLogger(__name__)


async def remote_service_error_handler(request: Request, exc: RemoteServiceError) -> JSONResponse:
    logger.error("Backend call failed on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Backend temporarily unavailable"},
    )


def get_application() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, debug_permissions=settings.debug_permissions)
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Store or provider failures that escape a route still answer 503.
    app.add_exception_handler(RemoteServiceError, remote_service_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)
    logger.info(
        "%s ready (%s), API under %s, remote timeout %ss",
        settings.app_name,
        settings.environment,
        settings.api_prefix,
        settings.remote_call_timeout_seconds,
    )
    return app


app = get_application()
