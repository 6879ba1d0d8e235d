"""FastAPI application factory for the account service."""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from country_accounts.accounts import (
    AccountQueries,
    AccountService,
    configure_account_router,
)
from country_accounts.auth import Validate
from country_accounts.config import AppConfig, load_config_from_env
from country_accounts.errors import AccountServiceError

LOGGER = logging.getLogger(__name__)


async def _service_error_handler(
    request: Request,
    exc: AccountServiceError,
) -> JSONResponse:
    LOGGER.debug(
        "%s %s failed with %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=exc.headers,
    )


async def _request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    LOGGER.debug("Malformed request to %s: %s", request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message},
    )


def configure_fastapi_app(config: AppConfig) -> FastAPI:
    """Configure and return the FastAPI application.

    :param config: Application configuration
    :return: Configured FastAPI application
    """
    if not Path(config.database_path).parent.exists():
        Path(config.database_path).parent.mkdir(parents=True, exist_ok=True)
        LOGGER.info(
            "Created directory for database at %s",
            Path(config.database_path).parent,
        )

    if not Path(config.database_path).exists():
        LOGGER.info("Database file does not exist at %s", config.database_path)

    queries = AccountQueries(config.database_path)
    service = AccountService(
        queries,
        config.security_manager,
        config.password_hasher,
    )
    validate = Validate(config.security_manager)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[Any, Any]:
        """Application lifespan manager.

        Opens the credential store on startup and closes it on shutdown.
        """
        LOGGER.info("Country accounts API is starting")

        async with queries:
            yield

        LOGGER.info("Country accounts API is shutting down")

    app = FastAPI(
        title="Country Accounts API",
        version="0.1.0",
        lifespan=lifespan,
        root_path=config.root_path,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AccountServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    account_router = configure_account_router(APIRouter(), service, validate)
    app.include_router(account_router, prefix=config.api_prefix, tags=["accounts"])

    @app.get("/")
    def read_root() -> str:
        return "Country Accounts API"

    return app


def create_app(env_file: str | None = os.environ.get("ENV_FILE", ".env")) -> FastAPI:
    """Create and configure the FastAPI application.

    The default here is for uvicorn command line usage, in which case the user
    should set ENV_FILE environment variable if they want a different file.

    :param env_file: Optional path to the environment configuration file
    :return: Configured FastAPI application
    """
    config = load_config_from_env(env_file)
    return configure_fastapi_app(config)
