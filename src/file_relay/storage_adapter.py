"""
Two-tier storage adapter: the local file cache in front of a remote object store.

Uploads always land in the local cache and are pushed to the remote store on a
best-effort basis; reads are served from the cache and fall back to the remote
store's public read path. Also owns filename generation and the public URL
policy for stored files.
"""

import logging
import posixpath
import threading
import uuid
from collections import Counter
from typing import Dict, Optional
from urllib.parse import unquote, urlsplit

import requests

from file_relay.adapters.cache import LocalFileCache
from file_relay.adapters.remote_store import DEFAULT_MIME_TYPE, RemoteStore
from file_relay.config.settings import Settings
from file_relay.errors import FetchError
from file_relay.models import StorageTier, StoredFile, UploadResult
from file_relay.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

DEV_FALLBACK_BASE_URL = "http://localhost:5000"
LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1"}
FALLBACK_ORIGINAL_NAME = "file"
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def generate_filename(original_name: str) -> str:
    """Random UUID plus the original extension, e.g. 'photo.jpg' -> '<uuid>.jpg'.

    Names without a dot (or ending in one) produce a bare UUID.
    """
    basename = original_name.replace("\\", "/").rsplit("/", 1)[-1]
    _, dot, extension = basename.rpartition(".")
    identifier = str(uuid.uuid4())
    return f"{identifier}.{extension}" if dot and extension else identifier


def request_hostname(host: str) -> Optional[str]:
    """Hostname part of a Host-style header value, or None when it does not parse."""
    try:
        return urlsplit(f"//{host}").hostname
    except ValueError:
        return None


def is_loopback_host(host: str) -> bool:
    hostname = request_hostname(host) or ""
    return hostname in LOOPBACK_HOSTS or hostname.endswith(".localhost")


def is_absolute_http_url(url: str) -> bool:
    """Whether url parses as an absolute http(s) URL with a host."""
    try:
        parsed = urlsplit(url.strip())
        return parsed.scheme in ("http", "https") and bool(parsed.hostname)
    except ValueError:
        return False


class StorageAdapter:
    """Stores, resolves and retrieves files across the cache and the remote store."""

    def __init__(
        self,
        cache: LocalFileCache,
        remote_store: RemoteStore,
        settings: Settings,
        http_session: Optional[requests.Session] = None,
    ):
        self.cache = cache
        self.remote_store = remote_store
        self.settings = settings
        self.http_session = http_session or requests.Session()
        self._tier_counts: Counter = Counter()
        self._tier_lock = threading.Lock()

    def resolve_base_url(self, request_host: Optional[str] = None) -> str:
        """Pick the externally visible base URL.

        Priority: request host, platform deployment URL, BASE_URL, local dev fallback.
        """
        if request_host:
            host = request_host.split(",")[0].strip()
            if host and request_hostname(host):
                scheme = "http" if is_loopback_host(host) else "https"
                return f"{scheme}://{host}"
            logger.warning(f"Ignoring unusable request host {request_host!r}")

        if self.settings.vercel_url:
            return f"https://{self.settings.vercel_url.strip().rstrip('/')}"

        if self.settings.base_url:
            return self.settings.base_url

        return DEV_FALLBACK_BASE_URL

    def public_url(self, filename: str, request_host: Optional[str] = None) -> str:
        return f"{self.resolve_base_url(request_host)}/files/{filename}"

    @log_execution_time
    def store(
        self,
        original_name: str,
        data: bytes,
        mime_type: str,
        size: int,
        request_host: Optional[str] = None,
    ) -> UploadResult:
        """Store bytes under a fresh filename and return its UploadResult.

        Remote store failures are absorbed: the file is always kept in the local
        cache and the result's tier records whether the remote push succeeded.
        """
        mime_type = mime_type or DEFAULT_MIME_TYPE
        filename = generate_filename(original_name)
        url = self.public_url(filename, request_host)

        pushed = self.remote_store.put(filename, data, mime_type)
        self.cache.put(StoredFile(filename=filename, data=data, mime_type=mime_type, size=size))

        tier = StorageTier.REMOTE_AND_LOCAL if pushed else StorageTier.LOCAL_ONLY
        with self._tier_lock:
            self._tier_counts[tier.value] += 1

        if pushed:
            logger.info(f"Stored {original_name} as {filename} ({size} bytes, {tier.value})")
        else:
            logger.warning(
                f"Stored {original_name} as {filename} in local cache only; "
                f"remote store '{self.remote_store.name}' did not accept it"
            )

        return UploadResult(
            name=filename,
            url=url,
            mime=mime_type,
            size=size,
            original_name=original_name,
            tier=tier,
        )

    @log_execution_time
    def store_from_url(self, source_url: str, request_host: Optional[str] = None) -> UploadResult:
        """Download source_url and store its bytes.

        :raises FetchError: unparseable URL, transport error, non-success
            status, or a body larger than the per-file size cap.
        """
        source_url = source_url.strip()
        if not is_absolute_http_url(source_url):
            raise FetchError(source_url, "not an absolute http(s) URL")

        try:
            with self.http_session.get(
                source_url,
                stream=True,
                timeout=self.settings.fetch_timeout_seconds,
            ) as response:
                if not response.ok:
                    raise FetchError(source_url, f"{response.status_code} {response.reason}")
                data = self._read_capped(response, source_url)
                mime_type = response.headers.get("content-type") or DEFAULT_MIME_TYPE
        except requests.exceptions.RequestException as e:
            raise FetchError(source_url, str(e)) from e

        original_name = posixpath.basename(unquote(urlsplit(source_url).path)) or FALLBACK_ORIGINAL_NAME
        return self.store(
            original_name=original_name,
            data=data,
            mime_type=mime_type,
            size=len(data),
            request_host=request_host,
        )

    def _read_capped(self, response: requests.Response, source_url: str) -> bytes:
        limit = self.settings.max_file_size_bytes
        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise FetchError(source_url, f"response is larger than {limit} bytes")

        buffer = bytearray()
        for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
            buffer.extend(chunk)
            if len(buffer) > limit:
                raise FetchError(source_url, f"response is larger than {limit} bytes")
        return bytes(buffer)

    def retrieve(self, filename: str) -> Optional[StoredFile]:
        """Return the stored file from the cache, else from the remote store, else None."""
        cached = self.cache.get(filename)
        if cached is not None:
            return cached

        remote = self.remote_store.get(filename)
        if remote is None:
            logger.info(f"File {filename} not found in cache or remote store")
            return None

        self.cache.put(remote)
        logger.info(f"Cached {filename} from remote store '{self.remote_store.name}'")
        return remote

    def stats(self) -> Dict[str, object]:
        with self._tier_lock:
            tiers = dict(self._tier_counts)
        return {
            "remote_store": self.remote_store.name,
            "remote_store_configured": self.remote_store.is_configured,
            "cache": self.cache.stats(),
            "stored_by_tier": {tier.value: tiers.get(tier.value, 0) for tier in StorageTier},
        }
