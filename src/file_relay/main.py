from textwrap import dedent
import logging
from typing import Optional

import pydantic
import requests
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from file_relay.adapters.cache import LocalFileCache
from file_relay.adapters.remote_store import RemoteStore, build_remote_store
from file_relay.config.settings import Settings
from file_relay.coordinator import UploadCoordinator
from file_relay.errors import (
    FileRelayError,
    handle_broad_exceptions,
    handle_file_relay_error,
    handle_http_exception,
    handle_pydantic_validation_errors,
)
from file_relay.routers.files import router as files_router
from file_relay.routers.health import router as health_router
from file_relay.storage_adapter import StorageAdapter
from file_relay.utils.log_setup import configure_logging

# Set up logging
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    remote_store: Optional[RemoteStore] = None,
    http_session: Optional[requests.Session] = None,
) -> FastAPI:
    """Create a FastAPI application.

    The local cache, the remote store and the storage adapter are built once
    here and live on `app.state` for the lifetime of the process.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="File Relay",
        summary="Upload up to three files or URLs and get stable public links back",
        version="v1",
        description=dedent(
            """\
        | Endpoint | Notes |
        | --- | --- |
        | `POST /api/upload` | multipart `files` parts and/or `urls` fields, at most 3 items |
        | `GET /files/{filename}` | serves a stored file with a one-year cache header |
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    cache = LocalFileCache(
        max_entries=settings.cache_max_entries,
        max_bytes=settings.cache_max_bytes,
    )
    remote_store = remote_store or build_remote_store(settings, session=http_session)
    storage_adapter = StorageAdapter(
        cache=cache,
        remote_store=remote_store,
        settings=settings,
        http_session=http_session,
    )

    app.state.settings = settings
    app.state.storage_adapter = storage_adapter
    app.state.upload_coordinator = UploadCoordinator(
        storage_adapter,
        max_items=settings.max_files_per_request,
        max_file_size_bytes=settings.max_file_size_bytes,
    )
    logger.info(
        f"File relay ready: remote store '{remote_store.name}' "
        f"({'configured' if remote_store.is_configured else 'not configured'})"
    )

    app.include_router(files_router, tags=["files"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(FileRelayError, handle_file_relay_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=5000)
