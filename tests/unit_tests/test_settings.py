import pytest
from pydantic import ValidationError

from file_relay.config.settings import Settings, get_settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.remote_store_backend == "supabase"
    assert settings.bucket_name == "auten"
    assert settings.max_files_per_request == 3
    assert settings.max_file_size_bytes == 50 * 1024 * 1024
    assert settings.fetch_timeout_seconds == 30
    assert settings.base_url is None
    assert settings.remote_store_configured is False


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", '"quoted-key"')
    monkeypatch.setenv("SUPABASE_BUCKET_NAME", "uploads")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.supabase_url == "https://project.supabase.co"
    assert settings.supabase_key == "quoted-key"
    assert settings.bucket_name == "uploads"
    assert settings.log_level == "DEBUG"
    assert settings.remote_store_configured is True


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("relay.example.com", "https://relay.example.com"),
        ("http://localhost:5000/", "http://localhost:5000"),
        ("", None),
    ],
)
def test_base_url_gets_a_scheme(raw, expected):
    assert Settings(_env_file=None, base_url=raw).base_url == expected


def test_rejects_unknown_backend():
    with pytest.raises(ValidationError, match="remote_store_backend"):
        Settings(_env_file=None, remote_store_backend="ftp")


def test_rejects_unknown_log_level():
    with pytest.raises(ValidationError, match="log_level"):
        Settings(_env_file=None, log_level="chatty")


def test_environment_dict_masks_the_key():
    settings = Settings(_env_file=None, supabase_key="secret-anon-key")

    env = settings.get_environment_dict()

    assert env["SUPABASE_ANON_KEY"] == "secr****"
    assert "secret-anon-key" not in env.values()


def test_get_settings_is_cached():
    get_settings.cache_clear()

    assert get_settings() is get_settings()

    get_settings.cache_clear()
