"""
Remote object-store clients.

Every backend exposes the same surface: put() pushes bytes and reports success
as a bool, get() reads a file back or returns None. Neither raises for
transport or service errors; the storage adapter treats the remote store as
best effort.
"""

import logging
from typing import TYPE_CHECKING, Optional, Protocol
from urllib.parse import quote

import boto3
import requests
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from file_relay.config.settings import Settings
from file_relay.models import StoredFile

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
LONG_TERM_CACHE_CONTROL = "public, max-age=31536000"


class RemoteStore(Protocol):
    """Durable backend behind the local cache."""

    name: str

    @property
    def is_configured(self) -> bool:
        ...

    def put(self, filename: str, data: bytes, mime_type: str) -> bool:
        """Push bytes under filename, overwriting any existing object."""
        ...

    def get(self, filename: str) -> Optional[StoredFile]:
        """Read a file back, or None when it cannot be fetched."""
        ...


class SupabaseRemoteStore:
    """Supabase Storage over its HTTP API."""

    name = "supabase"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket_name: str,
        upload_timeout: float = 30.0,
        fetch_timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket_name = bucket_name
        self.upload_timeout = upload_timeout
        self.fetch_timeout = fetch_timeout
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def object_url(self, filename: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket_name}/{quote(filename)}"

    def public_url(self, filename: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket_name}/{quote(filename)}"

    def put(self, filename: str, data: bytes, mime_type: str) -> bool:
        if not self.is_configured:
            logger.info("Supabase credentials not configured, using fallback storage")
            return False

        try:
            response = self.session.post(
                self.object_url(filename),
                data=data,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": mime_type,
                    "Cache-Control": LONG_TERM_CACHE_CONTROL,
                    "x-upsert": "true",
                },
                timeout=self.upload_timeout,
            )
        except requests.exceptions.Timeout:
            logger.error(f"Supabase upload of {filename} timed out after {self.upload_timeout}s")
            return False
        except requests.exceptions.RequestException as e:
            logger.error(f"Supabase upload error for {filename}: {str(e)}")
            return False

        if not response.ok:
            logger.error(f"Supabase upload failed: {response.status_code} - {response.text}")
            return False

        logger.info(f"Uploaded {filename} to Supabase bucket '{self.bucket_name}'")
        return True

    def get(self, filename: str) -> Optional[StoredFile]:
        if not self.is_configured:
            return None

        try:
            response = self.session.get(self.public_url(filename), timeout=self.fetch_timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Supabase download error for {filename}: {str(e)}")
            return None

        if not response.ok:
            logger.info(f"Supabase has no readable object {filename}: {response.status_code}")
            return None

        data = response.content
        return StoredFile(
            filename=filename,
            data=data,
            mime_type=response.headers.get("content-type") or DEFAULT_MIME_TYPE,
            size=len(data),
        )


class S3RemoteStore:
    """S3 (or any S3-compatible endpoint) through boto3."""

    name = "s3"

    def __init__(self, bucket_name: str, s3_client: Optional["S3Client"] = None):
        self.bucket_name = bucket_name
        self.s3_client = s3_client or boto3.client("s3")

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3RemoteStore":
        client_kwargs = {
            "region_name": settings.aws_region,
            "config": Config(
                connect_timeout=settings.upload_timeout_seconds,
                read_timeout=settings.upload_timeout_seconds,
            ),
        }
        if settings.aws_endpoint_url:
            client_kwargs["endpoint_url"] = settings.aws_endpoint_url
        if settings.aws_access_key_id:
            client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
        if settings.aws_secret_access_key:
            client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

        logger.info(f"Using S3 bucket: {settings.s3_bucket_name}")
        return cls(settings.s3_bucket_name, boto3.client("s3", **client_kwargs))

    @property
    def is_configured(self) -> bool:
        return bool(self.bucket_name)

    def put(self, filename: str, data: bytes, mime_type: str) -> bool:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=filename,
                Body=data,
                ContentType=mime_type or DEFAULT_MIME_TYPE,
                CacheControl=LONG_TERM_CACHE_CONTROL,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading {filename} to S3: {str(e)}")
            return False

        logger.info(f"Uploaded {filename} to S3 bucket '{self.bucket_name}'")
        return True

    def get(self, filename: str) -> Optional[StoredFile]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=filename)
            data = response["Body"].read()
        except (BotoCoreError, ClientError) as e:
            logger.info(f"S3 has no readable object {filename}: {str(e)}")
            return None

        return StoredFile(
            filename=filename,
            data=data,
            mime_type=response.get("ContentType") or DEFAULT_MIME_TYPE,
            size=len(data),
        )


class NullRemoteStore:
    """Backend 'none': the adapter runs in pure local-cache mode."""

    name = "none"

    @property
    def is_configured(self) -> bool:
        return False

    def put(self, filename: str, data: bytes, mime_type: str) -> bool:
        logger.info("Remote storage disabled, using fallback storage")
        return False

    def get(self, filename: str) -> Optional[StoredFile]:
        return None


def build_remote_store(settings: Settings, session: Optional[requests.Session] = None) -> RemoteStore:
    """Create the remote store selected by settings.remote_store_backend."""
    if settings.remote_store_backend == "supabase":
        if not settings.remote_store_configured:
            logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set, files will only be kept in the local cache")
        return SupabaseRemoteStore(
            base_url=settings.supabase_url,
            api_key=settings.supabase_key,
            bucket_name=settings.bucket_name,
            upload_timeout=settings.upload_timeout_seconds,
            fetch_timeout=settings.fetch_timeout_seconds,
            session=session,
        )
    if settings.remote_store_backend == "s3":
        return S3RemoteStore.from_settings(settings)
    return NullRemoteStore()
