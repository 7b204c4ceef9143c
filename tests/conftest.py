import pytest
from fastapi.testclient import TestClient

from file_relay.adapters.cache import LocalFileCache
from file_relay.adapters.remote_store import SupabaseRemoteStore
from file_relay.config.settings import Settings
from file_relay.main import create_app
from file_relay.storage_adapter import StorageAdapter
from tests.consts import (
    RELAY_ENV_VARS,
    SUPABASE_UPLOAD_PREFIX,
    TEST_BUCKET_NAME,
    TEST_SUPABASE_KEY,
    TEST_SUPABASE_URL,
)
from tests.fixtures.aws_fixtures import aws_credentials, mocked_aws  # noqa: F401
from tests.fixtures.http_fixtures import FakeSession


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the developer's environment and .env out of the settings under test."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        supabase_url=TEST_SUPABASE_URL,
        supabase_key=TEST_SUPABASE_KEY,
        bucket_name=TEST_BUCKET_NAME,
        max_file_size_bytes=1024,
    )


@pytest.fixture
def fake_session() -> FakeSession:
    """Supabase accepts every upload unless a test reroutes it."""
    session = FakeSession()
    session.add("POST", SUPABASE_UPLOAD_PREFIX, status_code=200, content=b'{"Key": "ok"}')
    return session


@pytest.fixture
def remote_store(settings: Settings, fake_session: FakeSession) -> SupabaseRemoteStore:
    return SupabaseRemoteStore(
        base_url=settings.supabase_url,
        api_key=settings.supabase_key,
        bucket_name=settings.bucket_name,
        session=fake_session,
    )


@pytest.fixture
def cache() -> LocalFileCache:
    return LocalFileCache(max_entries=100, max_bytes=1024 * 1024)


@pytest.fixture
def adapter(cache, remote_store, settings, fake_session) -> StorageAdapter:
    return StorageAdapter(cache=cache, remote_store=remote_store, settings=settings, http_session=fake_session)


@pytest.fixture
def app(settings: Settings, fake_session: FakeSession):
    return create_app(settings=settings, http_session=fake_session)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client
