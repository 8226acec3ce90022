import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from authgate import __version__
from authgate.api.router import api_router
from authgate.config import Settings, get_settings
from authgate.errors import GatewayError
from authgate.services.firebase_provider import FirebaseIdentityProvider
from authgate.services.identity_provider import IdentityProvider
from authgate.utils.tokens import SessionTokenCodec

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    logger.info(
        "%s ready on port %s (identity provider: %s)",
        settings.app_name,
        settings.port,
        type(app.state.identity_provider).__name__,
    )
    yield
    await app.state.identity_provider.aclose()


# Exception handlers
async def gateway_exception_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({"field": field, "message": error["msg"]})

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid request body.",
            "errors": errors,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)

    # Don't expose internal error details
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "An unexpected error occurred. Please try again later.",
        },
    )


def create_app(
    settings: Optional[Settings] = None,
    identity_provider: Optional[IdentityProvider] = None,
) -> FastAPI:
    """
    Build the application and its process-wide state.

    Configuration is checked here, before anything is wired, so a process
    missing its secrets fails at startup instead of on the first request.
    """
    settings = settings or get_settings()
    settings.validate_security()

    token_codec = SessionTokenCodec(
        settings.jwt_secret,
        ttl=timedelta(seconds=settings.session_token_ttl_seconds),
    )
    if identity_provider is None:
        identity_provider = FirebaseIdentityProvider.from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Account signup, signin and session tokens on top of Firebase Authentication",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_codec = token_codec
    app.state.identity_provider = identity_provider

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    # Global exception handlers
    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    return app


def run() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
    )
    uvicorn.run(
        "authgate.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
