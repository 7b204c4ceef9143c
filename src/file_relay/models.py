"""Domain types shared by the storage adapter, the coordinator and the routes."""
from dataclasses import dataclass
from enum import Enum


class StorageTier(str, Enum):
    """Where a stored file ended up."""
    REMOTE_AND_LOCAL = 'remote_and_local'
    LOCAL_ONLY = 'local_only'


@dataclass(frozen=True)
class StoredFile:
    """A stored file: generated filename, raw bytes, MIME type and size."""
    filename: str
    data: bytes
    mime_type: str
    size: int


@dataclass(frozen=True)
class UploadResult:
    """Response-facing projection of a StoredFile plus its public URL."""
    name: str
    url: str
    mime: str
    size: int
    original_name: str
    tier: StorageTier = StorageTier.LOCAL_ONLY

    @property
    def degraded(self) -> bool:
        return self.tier is StorageTier.LOCAL_ONLY
