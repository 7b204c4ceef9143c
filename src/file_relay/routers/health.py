from fastapi import APIRouter, Depends

from file_relay.config.settings import Settings
from file_relay.dependencies import get_app_settings, get_storage_adapter
from file_relay.schemas import HealthResponse
from file_relay.storage_adapter import StorageAdapter

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    adapter: StorageAdapter = Depends(get_storage_adapter),
) -> HealthResponse:
    """
    Health check endpoint for monitoring API status and storage readiness.

    Reports "degraded" when the remote store is not configured, since uploads
    are then only kept in the local cache of this process.
    """
    stats = adapter.stats()
    return HealthResponse(
        status="ok" if stats["remote_store_configured"] else "degraded",
        app_name=settings.app_name,
        remote_store=stats["remote_store"],
        remote_store_configured=stats["remote_store_configured"],
        cache=stats["cache"],
        stored_by_tier=stats["stored_by_tier"],
    )
