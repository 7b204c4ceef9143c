"""FastAPI dependencies resolving the per-process objects built by the app factory."""
from fastapi import Request

from file_relay.config.settings import Settings
from file_relay.coordinator import UploadCoordinator
from file_relay.storage_adapter import StorageAdapter


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage_adapter(request: Request) -> StorageAdapter:
    return request.app.state.storage_adapter


def get_upload_coordinator(request: Request) -> UploadCoordinator:
    return request.app.state.upload_coordinator


def get_request_host(request: Request) -> str | None:
    """Host the client used to reach us, preferring the proxy-forwarded one."""
    return request.headers.get("x-forwarded-host") or request.headers.get("host")
