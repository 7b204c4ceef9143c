"""Upload coordination: validate a multi-item request and fan it out to the storage adapter."""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from file_relay.errors import FetchError, InvalidUploadRequest, UploadProcessingError
from file_relay.models import UploadResult
from file_relay.storage_adapter import StorageAdapter, is_absolute_http_url

logger = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024


@dataclass(frozen=True)
class IncomingFile:
    """A file part received in an upload request."""
    original_name: str
    data: bytes
    mime_type: str
    size: int


class UploadCoordinator:
    """
    Validates upload requests and stores their items in order.

    Files are processed before URLs. The first failing item aborts the
    request; items stored before it are kept (there is no rollback).
    """

    def __init__(self, adapter: StorageAdapter, max_items: int = 3, max_file_size_bytes: int = 50 * MEGABYTE):
        self.adapter = adapter
        self.max_items = max_items
        self.max_file_size_bytes = max_file_size_bytes

    def validate(self, files: Sequence[IncomingFile], urls: Sequence[str]) -> None:
        """Reject the request before anything is stored.

        :raises InvalidUploadRequest: no items, too many items, or an oversized file.
        """
        total = len(files) + len(urls)
        if total == 0:
            raise InvalidUploadRequest("No files or URLs provided")
        if total > self.max_items:
            raise InvalidUploadRequest(f"At most {self.max_items} files can be uploaded at once")

        for incoming in files:
            if incoming.size > self.max_file_size_bytes:
                raise InvalidUploadRequest(
                    f"File {incoming.original_name} is too large. "
                    f"Maximum is {self.max_file_size_bytes // MEGABYTE}MB per file."
                )

    def process(
        self,
        files: Sequence[IncomingFile],
        urls: Sequence[str],
        request_host: Optional[str] = None,
        is_disconnected: Optional[Callable[[], bool]] = None,
    ) -> List[UploadResult]:
        """Store every file, then every URL, returning results in that order.

        is_disconnected is polled before each URL download; once it reports the
        client gone, the remaining URLs are skipped and the partial results returned.
        """
        self.validate(files, urls)

        results: List[UploadResult] = []

        for incoming in files:
            try:
                result = self.adapter.store(
                    original_name=incoming.original_name,
                    data=incoming.data,
                    mime_type=incoming.mime_type,
                    size=incoming.size,
                    request_host=request_host,
                )
            except Exception as e:
                logger.exception(f"File upload error for {incoming.original_name}")
                raise UploadProcessingError(f"Failed to upload file {incoming.original_name}") from e
            results.append(result)

        for index, url in enumerate(urls):
            if is_disconnected is not None and is_disconnected():
                logger.warning(f"Client disconnected, skipping {len(urls) - index} remaining URL(s)")
                break
            if not is_absolute_http_url(url):
                raise InvalidUploadRequest(f"Invalid URL: {url}")
            try:
                result = self.adapter.store_from_url(url, request_host=request_host)
            except FetchError as e:
                logger.error(f"URL upload error: {e.message}")
                raise UploadProcessingError(f"Failed to upload from URL: {url}") from e
            except Exception as e:
                logger.exception(f"URL upload error for {url}")
                raise UploadProcessingError(f"Failed to upload from URL: {url}") from e
            results.append(result)

        degraded = sum(1 for result in results if result.degraded)
        logger.info(f"Upload request stored {len(results)} item(s), {degraded} in local cache only")
        return results
