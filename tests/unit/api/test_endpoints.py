"""
Unit tests for API REST endpoints.

Drives the full Flask app through the test client, backed by in-memory
storage, a fake identity provider and a frozen clock.
"""

import re
from datetime import timedelta
from io import BytesIO

import pytest

from app_factory import create_app
from tests.fixtures import OTHER_TOKEN, VALID_TOKEN

BASE = "/api/v1/files"
FILE_ID_RE = re.compile(r"^\d+-[a-z0-9]+$")


def _auth(token=VALID_TOKEN):
    return {"Authorization": f"Bearer {token}"}


def _upload(client, name="report.pdf", content=b"abc", headers=None):
    return client.post(
        f"{BASE}/upload",
        data={"file": (BytesIO(content), name)},
        content_type="multipart/form-data",
        headers=headers or {},
    )


@pytest.fixture
def unconfigured_env(monkeypatch):
    for name in ("STORAGE_BACKEND", "GCS_BUCKET_NAME", "S3_BUCKET_NAME", "LOCAL_STORAGE_DIR", "AUTH_PROVIDER"):
        monkeypatch.delenv(name, raising=False)


class TestUploadEndpoint:
    def test_upload(self, client, storage):
        response = _upload(client)

        assert response.status_code == 200
        data = response.get_json()
        assert data["message"] == "File uploaded successfully"
        assert FILE_ID_RE.match(data["fileId"])
        assert data["downloadUrl"]
        assert isinstance(data["expiresAt"], int)
        assert storage.keys() == [f"uploads/{data['fileId']}-report.pdf"]

    def test_upload_with_token_is_scoped(self, client, storage):
        response = _upload(client, headers=_auth())

        assert response.status_code == 200
        assert response.get_json()["userId"] == "user-123"
        assert storage.keys()[0].startswith("uploads/user-123/")

    def test_upload_without_file(self, client, storage):
        response = client.post(f"{BASE}/upload", data={}, content_type="multipart/form-data")

        assert response.status_code == 400
        assert response.get_json()["error"] == "No file provided"
        assert storage.calls("put") == []

    def test_upload_empty_file(self, client):
        response = _upload(client, content=b"")
        assert response.status_code == 400

    def test_upload_over_size_limit(self, app, client, storage):
        app.config["MAX_CONTENT_LENGTH"] = 1024

        response = _upload(client, content=b"x" * 4096)

        assert response.status_code == 400
        data = response.get_json()
        assert data["category"] == "invalid_input"
        assert data["error"].startswith("File too large")
        assert storage.calls("put") == []

    def test_invalid_token_rejected_before_storage(self, client, storage):
        response = _upload(client, headers=_auth("forged"))

        assert response.status_code == 401
        assert storage.calls() == []

    def test_malformed_header(self, client, storage):
        response = _upload(client, headers={"Authorization": "Token abc"})

        assert response.status_code == 401
        assert storage.calls() == []

    def test_wrong_method(self, client):
        assert client.get(f"{BASE}/upload").status_code == 405


class TestDownloadEndpoint:
    def test_download(self, client):
        file_id = _upload(client).get_json()["fileId"]

        response = client.get(f"{BASE}/download", query_string={"fileId": file_id})

        assert response.status_code == 200
        data = response.get_json()
        assert data["fileName"].endswith("report.pdf")
        assert data["downloadUrl"].startswith("https://storage.example.com/")
        assert data["originalFileName"] == "report.pdf"

    def test_missing_file_id(self, client):
        response = client.get(f"{BASE}/download")

        assert response.status_code == 400
        assert response.get_json()["error"] == "fileId parameter required"

    def test_unknown_file(self, client):
        response = client.get(f"{BASE}/download", query_string={"fileId": "1700000000000-nope"})
        assert response.status_code == 404
        assert response.get_json()["error"] == "File not found"

    def test_malformed_file_id(self, client):
        response = client.get(f"{BASE}/download", query_string={"fileId": "../secret"})
        assert response.status_code == 404

    def test_expired_file(self, client, clock):
        file_id = _upload(client).get_json()["fileId"]
        clock.advance(timedelta(hours=25))

        response = client.get(f"{BASE}/download", query_string={"fileId": file_id})

        assert response.status_code == 410
        assert response.get_json()["error"] == "File has expired"

        listing = client.get(f"{BASE}/").get_json()
        assert listing == {"files": []}

    def test_scoped_file_needs_owner(self, client):
        file_id = _upload(client, headers=_auth()).get_json()["fileId"]

        anonymous = client.get(f"{BASE}/download", query_string={"fileId": file_id})
        stranger = client.get(
            f"{BASE}/download", query_string={"fileId": file_id}, headers=_auth(OTHER_TOKEN)
        )
        owner = client.get(f"{BASE}/download", query_string={"fileId": file_id}, headers=_auth())

        assert anonymous.status_code == 404
        assert stranger.status_code == 404
        assert owner.status_code == 200

    def test_wrong_method(self, client):
        assert client.post(f"{BASE}/download").status_code == 405


class TestListEndpoint:
    def test_empty(self, client):
        response = client.get(f"{BASE}/")
        assert response.status_code == 200
        assert response.get_json() == {"files": []}

    def test_lists_uploads(self, client):
        file_id = _upload(client, name="a b.txt").get_json()["fileId"]

        files = client.get(f"{BASE}/").get_json()["files"]

        assert len(files) == 1
        assert files[0]["fileId"] == file_id
        assert files[0]["fileName"] == "a_b.txt"
        assert files[0]["isExpired"] is False
        assert files[0]["size"] == 3

    def test_listing_shows_expired_without_deleting(self, client, clock, storage):
        _upload(client)
        clock.advance(timedelta(hours=25))

        files = client.get(f"{BASE}/").get_json()["files"]

        assert files[0]["isExpired"] is True
        assert len(storage.keys()) == 1

    def test_storage_failure(self, client, storage):
        storage.fail_list = True
        response = client.get(f"{BASE}/")
        assert response.status_code == 500
        assert response.get_json()["category"] == "storage_read_error"


class TestCleanupEndpoint:
    def test_cleanup(self, client, clock, storage):
        _upload(client)
        _upload(client, headers=_auth())
        clock.advance(timedelta(hours=25))
        _upload(client, name="fresh.txt")

        response = client.post(f"{BASE}/cleanup")

        assert response.status_code == 200
        data = response.get_json()
        assert data["deletedFiles"] == 2
        assert data["remainingFiles"] == 1
        assert data["message"] == "Cleanup completed. Deleted 2 expired files."
        assert data["files"][0]["name"].endswith("-fresh.txt")
        assert len(storage.keys()) == 1

    def test_batch_failure_is_reported(self, client, clock, storage):
        _upload(client)
        clock.advance(timedelta(hours=25))
        storage.fail_delete_many = True

        response = client.post(f"{BASE}/cleanup")

        assert response.status_code == 200
        assert response.get_json()["deletedFiles"] == 0
        assert "error" in response.get_json()

    def test_listing_failure(self, client, storage):
        storage.fail_list = True
        assert client.post(f"{BASE}/cleanup").status_code == 500

    def test_wrong_method(self, client):
        assert client.get(f"{BASE}/cleanup").status_code == 405


class TestStatsEndpoint:
    def test_requires_token(self, client, storage):
        response = client.get(f"{BASE}/stats")

        assert response.status_code == 401
        assert storage.calls() == []

    def test_stats(self, client):
        _upload(client, content=b"x" * 1536, headers=_auth())
        _upload(client, content=b"x" * 4096)

        response = client.get(f"{BASE}/stats", headers=_auth())

        assert response.status_code == 200
        data = response.get_json()
        assert data["totalSize"] == 1536
        assert data["fileCount"] == 1
        assert data["maxSize"] == 500 * 1024 * 1024
        assert data["formatted"]["used"] == "1.5 KB"
        assert data["formatted"]["max"] == "500 MB"


class TestRequireAuth:
    def test_anonymous_rejected(self, app_config, storage, identity_provider, clock, monkeypatch):
        monkeypatch.setenv("REQUIRE_AUTH", "true")
        client = create_app(
            app_config, storage=storage, identity_provider=identity_provider, clock=clock
        ).test_client()

        assert _upload(client).status_code == 401
        assert client.get(f"{BASE}/").status_code == 401
        assert _upload(client, headers=_auth()).status_code == 200
        assert storage.calls("list") == []


class TestNotInitialized:
    def test_storage_missing(self, app_config, unconfigured_env, identity_provider):
        client = create_app(app_config, identity_provider=identity_provider).test_client()

        for response in (
            _upload(client),
            client.get(f"{BASE}/download", query_string={"fileId": "1-a"}),
            client.get(f"{BASE}/"),
            client.post(f"{BASE}/cleanup"),
            client.get(f"{BASE}/stats", headers=_auth()),
        ):
            assert response.status_code == 500
            assert "not initialized" in response.get_json()["error"]

    def test_token_without_identity_provider(self, app_config, unconfigured_env, storage):
        client = create_app(app_config, storage=storage).test_client()

        response = _upload(client, headers=_auth())

        assert response.status_code == 500
        assert "not initialized" in response.get_json()["error"]
        assert storage.calls() == []

    def test_anonymous_without_identity_provider(self, app_config, unconfigured_env, storage):
        client = create_app(app_config, storage=storage).test_client()
        assert _upload(client).status_code == 200


class TestHealthEndpoint:
    def test_healthy(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.get_json()
        assert data["storage"] == "initialized"
        assert data["identity_provider"] == "configured"
        assert data["celery"] == "unavailable"

    def test_degraded_without_storage(self, app_config, unconfigured_env):
        response = create_app(app_config).test_client().get("/health")
        assert response.status_code == 503
        assert response.get_json()["storage"] == "not_initialized"
