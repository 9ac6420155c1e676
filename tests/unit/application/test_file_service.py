"""
Unit tests for FileService.

Runs every use case against the in-memory storage backend with a frozen
clock so that expiry is deterministic.
"""

import re
from datetime import timedelta

import pytest

from filedrop.application import DOWNLOAD_URL_TTL, STORAGE_QUOTA_BYTES
from filedrop.domain.errors import (
    FileExpiredError,
    InvalidInputError,
    StorageReadError,
    StoredFileNotFoundError,
)
from filedrop.domain.file_storage import FILE_TTL
from filedrop.domain.identity import Identity

FILE_ID_RE = re.compile(r"^\d+-[a-z0-9]+$")


class TestUpload:
    def test_upload_global(self, file_service, storage, fixed_datetime):
        result = file_service.upload_file("report.pdf", b"abc", "application/pdf")

        assert FILE_ID_RE.match(result.file.file_id)
        assert storage.keys() == [f"uploads/{result.file.file_id}-report.pdf"]
        assert result.download_url.startswith("https://storage.example.com/uploads/")
        assert result.file.expires_at == fixed_datetime + FILE_TTL

        body = result.to_dict()
        assert body["message"] == "File uploaded successfully"
        assert body["fileId"] == result.file.file_id
        assert "userId" not in body

    def test_upload_scoped(self, file_service, storage, identity):
        result = file_service.upload_file("a.txt", b"x", "text/plain", identity)

        key = storage.keys()[0]
        assert key.startswith("uploads/user-123/")
        assert storage.metadata(key)["userId"] == "user-123"
        assert storage.metadata(key)["userEmail"] == "alice@example.com"
        assert result.to_dict()["userId"] == "user-123"

    def test_upload_records_metadata(self, file_service, storage):
        result = file_service.upload_file("my report.pdf", b"abcd", "application/pdf")

        metadata = storage.metadata(result.file.key)
        assert metadata["contentType"] == "application/pdf"
        assert metadata["size"] == "4"
        assert metadata["expiresAt"] == str(result.file.expires_at_millis)
        assert metadata["originalName"] == "my report.pdf"

    def test_upload_url_valid_for_one_hour(self, file_service, storage):
        result = file_service.upload_file("a.txt", b"x")
        assert DOWNLOAD_URL_TTL == timedelta(hours=1)
        assert result.download_url.endswith("ttl=3600")
        assert len(storage.calls("get_access_url")) == 1

    def test_upload_defaults_content_type(self, file_service, storage):
        result = file_service.upload_file("a.bin", b"x", None)
        assert storage.metadata(result.file.key)["contentType"] == "application/octet-stream"

    def test_empty_upload_rejected(self, file_service, storage):
        with pytest.raises(InvalidInputError, match="No file provided"):
            file_service.upload_file("empty.txt", b"")
        assert storage.calls("put") == []

    def test_identifiers_are_unique(self, file_service):
        ids = {file_service.upload_file("a.txt", b"x").file.file_id for _ in range(20)}
        assert len(ids) == 20


class TestDownload:
    def test_download_link(self, file_service):
        uploaded = file_service.upload_file("report.pdf", b"abc", "application/pdf")

        link = file_service.get_download_link(uploaded.file.file_id)
        body = link.to_dict()

        assert body["fileName"] == "report.pdf"
        assert body["fileName"].endswith("report.pdf")
        assert body["expiresAt"] == uploaded.file.expires_at_millis
        assert body["downloadUrl"].startswith("https://storage.example.com/")
        assert body["originalFileName"] == "report.pdf"

    def test_file_name_is_sanitized_original_is_not(self, file_service):
        uploaded = file_service.upload_file("my report.pdf", b"abc")
        body = file_service.get_download_link(uploaded.file.file_id).to_dict()
        assert body["fileName"] == "my_report.pdf"
        assert body["originalFileName"] == "my report.pdf"

    def test_missing_file_id(self, file_service):
        with pytest.raises(InvalidInputError, match="fileId parameter required"):
            file_service.get_download_link("")

    def test_unknown_file(self, file_service):
        with pytest.raises(StoredFileNotFoundError):
            file_service.get_download_link("1700000000000-doesnotexist")

    def test_malformed_file_id_is_not_found(self, file_service, storage):
        with pytest.raises(StoredFileNotFoundError):
            file_service.get_download_link("../../etc/passwd")
        assert storage.calls("list") == []

    def test_prefix_of_longer_identifier_does_not_match(self, file_service, storage):
        storage.seed("uploads/1700000000000-abc1-x.txt")
        with pytest.raises(StoredFileNotFoundError):
            file_service.get_download_link("1700000000000-abc")

    def test_other_namespace_is_invisible(self, file_service, identity):
        uploaded = file_service.upload_file("a.txt", b"x", identity=identity)
        with pytest.raises(StoredFileNotFoundError):
            file_service.get_download_link(uploaded.file.file_id)
        with pytest.raises(StoredFileNotFoundError):
            file_service.get_download_link(
                uploaded.file.file_id, Identity(user_id="someone-else")
            )
        assert file_service.get_download_link(uploaded.file.file_id, identity)

    def test_expired_file_deleted_on_access(self, file_service, storage, clock):
        uploaded = file_service.upload_file("report.pdf", b"abc")
        clock.advance(timedelta(hours=25))

        with pytest.raises(FileExpiredError, match="File has expired"):
            file_service.get_download_link(uploaded.file.file_id)

        assert storage.keys() == []
        with pytest.raises(StoredFileNotFoundError):
            file_service.get_download_link(uploaded.file.file_id)

    def test_expiry_boundary(self, file_service, clock):
        uploaded = file_service.upload_file("a.txt", b"x")
        clock.advance(FILE_TTL - timedelta(milliseconds=1))
        assert file_service.get_download_link(uploaded.file.file_id)

        clock.advance(timedelta(milliseconds=1))
        with pytest.raises(FileExpiredError):
            file_service.get_download_link(uploaded.file.file_id)

    def test_failed_delete_still_reports_expired(self, file_service, storage, clock):
        uploaded = file_service.upload_file("a.txt", b"x")
        clock.advance(timedelta(hours=25))
        storage.fail_delete = True

        with pytest.raises(FileExpiredError):
            file_service.get_download_link(uploaded.file.file_id)
        assert storage.keys() == [uploaded.file.key]

    def test_object_without_expiry_never_expires(self, file_service, storage, clock):
        storage.seed("uploads/1700000000000-legacy-old.txt")
        clock.advance(timedelta(days=365))
        body = file_service.get_download_link("1700000000000-legacy").to_dict()
        assert body["expiresAt"] is None
        assert "originalFileName" not in body


class TestListing:
    def test_empty(self, file_service):
        assert file_service.list_files().to_dict() == {"files": []}

    def test_lists_direct_children_only(self, file_service, identity):
        file_service.upload_file("global.txt", b"x")
        file_service.upload_file("mine.txt", b"y", identity=identity)

        global_files = file_service.list_files().to_dict()["files"]
        user_files = file_service.list_files(identity).to_dict()["files"]

        assert [f["fileName"] for f in global_files] == ["global.txt"]
        assert [f["fileName"] for f in user_files] == ["mine.txt"]

    def test_expired_files_are_flagged_not_deleted(self, file_service, storage, clock):
        file_service.upload_file("old.txt", b"x")
        clock.advance(timedelta(hours=25))

        entries = file_service.list_files().to_dict()["files"]
        assert entries[0]["isExpired"] is True
        assert len(storage.keys()) == 1
        assert storage.calls("delete") == []

    def test_foreign_objects_skipped(self, file_service, storage):
        storage.seed("uploads/readme.txt")
        file_service.upload_file("a.txt", b"x")
        entries = file_service.list_files().to_dict()["files"]
        assert [e["fileName"] for e in entries] == ["a.txt"]

    def test_listing_failure_propagates(self, file_service, storage):
        storage.fail_list = True
        with pytest.raises(StorageReadError):
            file_service.list_files()


class TestCleanup:
    def test_nothing_to_clean(self, file_service, storage):
        file_service.upload_file("a.txt", b"x")
        report = file_service.cleanup_expired_files().to_dict()

        assert report["deletedFiles"] == 0
        assert report["remainingFiles"] == 1
        assert report["message"] == "Cleanup completed. Deleted 0 expired files."
        assert storage.calls("delete_many") == []

    def test_deletes_expired_across_namespaces(self, file_service, storage, clock, identity):
        file_service.upload_file("old-global.txt", b"x")
        file_service.upload_file("old-user.txt", b"x", identity=identity)
        clock.advance(timedelta(hours=23))
        fresh = file_service.upload_file("fresh.txt", b"abc")
        clock.advance(timedelta(hours=2))

        report = file_service.cleanup_expired_files().to_dict()

        assert report["deletedFiles"] == 2
        assert report["remainingFiles"] == 1
        assert report["files"][0]["name"] == f"{fresh.file.file_id}-fresh.txt"
        assert report["files"][0]["size"] == 3
        assert report["files"][0]["expiresAt"] == fresh.file.expires_at.isoformat()
        assert storage.keys() == [fresh.file.key]
        assert len(storage.calls("delete_many")) == 1

    def test_objects_without_expiry_are_kept(self, file_service, storage, clock):
        storage.seed("uploads/notes.txt")
        clock.advance(timedelta(days=30))
        report = file_service.cleanup_expired_files().to_dict()
        assert report["deletedFiles"] == 0
        assert report["files"] == [{"name": "notes.txt", "size": 4, "expiresAt": None}]

    def test_batch_failure_reported(self, file_service, storage, clock):
        file_service.upload_file("a.txt", b"x")
        clock.advance(timedelta(hours=25))
        storage.fail_delete_many = True

        report = file_service.cleanup_expired_files().to_dict()

        assert report["deletedFiles"] == 0
        assert report["error"] == "batch delete rejected"
        assert len(storage.keys()) == 1

    def test_listing_failure_propagates(self, file_service, storage):
        storage.fail_list = True
        with pytest.raises(StorageReadError):
            file_service.cleanup_expired_files()

    def test_idempotent(self, file_service, clock):
        file_service.upload_file("a.txt", b"x")
        clock.advance(timedelta(hours=25))
        assert file_service.cleanup_expired_files().deleted_count == 1
        assert file_service.cleanup_expired_files().deleted_count == 0


class TestStorageStats:
    def test_empty_namespace(self, file_service, identity):
        stats = file_service.get_storage_stats(identity).to_dict()
        assert stats["totalSize"] == 0
        assert stats["fileCount"] == 0
        assert stats["maxSize"] == STORAGE_QUOTA_BYTES
        assert stats["formatted"]["used"] == "0 B"

    def test_counts_only_own_namespace(self, file_service, identity):
        file_service.upload_file("a.txt", b"x" * 1024, identity=identity)
        file_service.upload_file("b.txt", b"x" * 512, identity=identity)
        file_service.upload_file("global.txt", b"x" * 4096)

        stats = file_service.get_storage_stats(identity).to_dict()
        assert stats["totalSize"] == 1536
        assert stats["fileCount"] == 2
        assert stats["formatted"]["used"] == "1.5 KB"

    def test_expired_files_still_count(self, file_service, identity, clock):
        file_service.upload_file("a.txt", b"x", identity=identity)
        clock.advance(timedelta(days=2))
        assert file_service.get_storage_stats(identity).file_count == 1

    def test_over_quota(self, storage, clock, identity):
        from filedrop.application import FileService

        service = FileService(storage, clock=clock, quota_bytes=10)
        service.upload_file("a.txt", b"x" * 12, identity=identity)

        stats = service.get_storage_stats(identity).to_dict()
        assert stats["remainingSize"] == 0
        assert stats["usedPercentage"] == 120.0
