# src/file_relay/config/settings.py
import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MEGABYTE = 1024 * 1024

REMOTE_STORE_BACKENDS = ["supabase", "s3", "none"]


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from file_relay.config import get_settings
        settings = get_settings()
        bucket = settings.bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="file-relay",
        description="Application name"
    )

    # Remote Store Selection
    remote_store_backend: str = Field(
        default="supabase",
        description="Remote object store: supabase, s3, or none (pure local cache)"
    )

    # Supabase Storage Configuration
    supabase_url: str = Field(
        default="",
        alias="SUPABASE_URL",
        description="Base URL of the Supabase project"
    )

    supabase_key: str = Field(
        default="",
        alias="SUPABASE_ANON_KEY",
        description="Bearer credential for the storage API"
    )

    bucket_name: str = Field(
        default="auten",
        alias="SUPABASE_BUCKET_NAME",
        description="Storage bucket that receives uploads"
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="file-relay",
        alias="S3_BUCKET_NAME",
        description="S3 bucket used when remote_store_backend is s3"
    )

    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # Public URL Resolution
    base_url: Optional[str] = Field(
        default=None,
        alias="BASE_URL",
        description="Externally advertised base URL"
    )

    vercel_url: Optional[str] = Field(
        default=None,
        alias="VERCEL_URL",
        description="Platform-assigned deployment hostname"
    )

    # Upload Limits
    max_files_per_request: int = Field(
        default=3,
        ge=1,
        description="Combined number of files and URLs accepted per request"
    )

    max_file_size_bytes: int = Field(
        default=50 * MEGABYTE,
        description="Per-file size cap, also applied to URL downloads"
    )

    max_field_size_bytes: int = Field(
        default=10 * MEGABYTE,
        description="Size cap for non-file multipart fields"
    )

    # Network Timeouts
    upload_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for pushing bytes to the remote store"
    )

    fetch_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for URL-sourced downloads and remote read-back"
    )

    # Local Cache
    cache_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of files held in the local cache"
    )

    cache_max_bytes: int = Field(
        default=512 * MEGABYTE,
        ge=1,
        description="Maximum total bytes held in the local cache"
    )

    # CORS
    cors_allow_origins: List[str] = Field(
        default=["*"],
        description="Origins allowed to call the API"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level"
    )

    @field_validator("remote_store_backend", mode="before")
    @classmethod
    def validate_remote_store_backend(cls, v):
        """Validate the remote store backend is one of the allowed values."""
        v = (v or "none").strip().lower()
        if v not in REMOTE_STORE_BACKENDS:
            raise ValueError(f"Invalid remote_store_backend: {v}. Must be one of {REMOTE_STORE_BACKENDS}")
        return v

    @field_validator("supabase_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("supabase_key", mode="after")
    @classmethod
    def clean_api_key(cls, v: str) -> str:
        return v.strip().strip('"').strip("'")

    @field_validator("base_url", mode="after")
    @classmethod
    def add_scheme_to_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Prefix BASE_URL with https:// when it is given without a scheme."""
        if not v:
            return None
        v = v.strip().rstrip("/")
        return v if v.startswith("http") else f"https://{v}"

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log_level: {v}")
        return level

    @property
    def remote_store_configured(self) -> bool:
        """Whether the selected backend has what it needs to talk to the remote store."""
        if self.remote_store_backend == "supabase":
            return bool(self.supabase_url and self.supabase_key)
        if self.remote_store_backend == "s3":
            return bool(self.s3_bucket_name)
        return False

    def get_environment_dict(self) -> dict:
        """Get configuration as a dictionary with secrets masked.

        Returns:
            Dictionary of environment variables
        """
        return {
            'APP_NAME': self.app_name,
            'REMOTE_STORE_BACKEND': self.remote_store_backend,
            'SUPABASE_URL': self.supabase_url,
            'SUPABASE_ANON_KEY': _mask(self.supabase_key),
            'SUPABASE_BUCKET_NAME': self.bucket_name,
            'S3_BUCKET_NAME': self.s3_bucket_name,
            'AWS_DEFAULT_REGION': self.aws_region,
            'AWS_ENDPOINT_URL': self.aws_endpoint_url or '',
            'BASE_URL': self.base_url or '',
            'VERCEL_URL': self.vercel_url or '',
            'MAX_FILES_PER_REQUEST': str(self.max_files_per_request),
            'MAX_FILE_SIZE_BYTES': str(self.max_file_size_bytes),
            'CACHE_MAX_ENTRIES': str(self.cache_max_entries),
            'CACHE_MAX_BYTES': str(self.cache_max_bytes),
            'LOG_LEVEL': self.log_level,
        }

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def _mask(secret: str) -> str:
    if not secret:
        return ""
    return f"{secret[:4]}****"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
