from fastapi import status
from fastapi.testclient import TestClient

from file_relay.main import create_app
from tests.consts import (
    TEST_FILE_CONTENT,
    TEST_FILE_CONTENT_TYPE,
    TEST_FILE_NAME,
    TEST_SOURCE_URL,
    TEST_TEXT_CONTENT,
    TEST_TEXT_CONTENT_TYPE,
    TEST_TEXT_NAME,
)

TEXT_PART = ("files", (TEST_TEXT_NAME, TEST_TEXT_CONTENT, TEST_TEXT_CONTENT_TYPE))


def _cache_entries(client: TestClient) -> int:
    return client.get("/health").json()["cache"]["entries"]


def test_upload_without_items(client: TestClient):
    response = client.post("/api/upload", data={"note": "nothing here"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"success": False, "error": "No files or URLs provided"}


def test_upload_blank_url_counts_as_nothing(client: TestClient):
    response = client.post("/api/upload", data={"urls": "   "})

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_upload_too_many_items(client: TestClient):
    response = client.post(
        "/api/upload",
        files=[TEXT_PART, TEXT_PART, TEXT_PART],
        data={"urls": [TEST_SOURCE_URL]},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"success": False, "error": "At most 3 files can be uploaded at once"}
    assert _cache_entries(client) == 0


def test_upload_oversized_file(client: TestClient):
    response = client.post(
        "/api/upload",
        files=[("files", ("big.bin", b"x" * 4096, "application/octet-stream"))],
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert "big.bin is too large" in body["error"]
    assert _cache_entries(client) == 0


def test_upload_malformed_url(client: TestClient):
    response = client.post("/api/upload", data={"urls": "htp:/broken"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"success": False, "error": "Invalid URL: htp:/broken"}


def test_upload_unreachable_url(client: TestClient):
    url = "https://unreachable.example.com/file.pdf"

    response = client.post("/api/upload", files=[TEXT_PART], data={"urls": [url]})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"success": False, "error": f"Failed to upload from URL: {url}"}
    # The file processed before the URL stays stored
    assert _cache_entries(client) == 1


def test_upload_url_with_error_status(client: TestClient, fake_session):
    fake_session.add("GET", TEST_SOURCE_URL, status_code=403)

    response = client.post("/api/upload", data={"urls": TEST_SOURCE_URL})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert TEST_SOURCE_URL in response.json()["error"]


def test_get_unknown_file(client: TestClient):
    response = client.get("/files/does-not-exist.png")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "File not found"}


def test_head_unknown_file(client: TestClient):
    response = client.head("/files/does-not-exist.png")

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_unknown_route_uses_error_envelope(client: TestClient):
    response = client.get("/api/nothing-here")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["success"] is False


def test_unexpected_error_becomes_500(client: TestClient, app, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(app.state.upload_coordinator, "process", explode)

    response = client.post(
        "/api/upload",
        files=[("files", (TEST_FILE_NAME, TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE))],
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"success": False, "error": "Internal server error"}


def test_upload_oversized_url_field(settings, fake_session):
    settings = settings.model_copy(update={"max_field_size_bytes": 256})
    app = create_app(settings=settings, http_session=fake_session)
    long_url = f"{TEST_SOURCE_URL}?q={'a' * 512}"

    with TestClient(app) as client:
        # A file part forces a multipart body, where the field cap applies
        response = client.post("/api/upload", files=[TEXT_PART], data={"urls": [long_url]})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["success"] is False
        assert _cache_entries(client) == 0
    assert fake_session.calls_to("GET", TEST_SOURCE_URL) == []
