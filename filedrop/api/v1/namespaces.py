"""
API Namespaces - Organized endpoint groups
"""

from io import BytesIO
from typing import Optional

from flask import current_app, request, send_file
from flask_restx import Namespace, Resource
from werkzeug.exceptions import RequestEntityTooLarge

from filedrop.application import AuthService, FileService
from filedrop.domain.errors import (
    ConfigurationError,
    DomainError,
    ErrorCategory,
    InvalidInputError,
    create_error_response,
    error_response_from,
)
from filedrop.domain.file_storage import format_bytes
from filedrop.domain.identity import Identity

from filedrop.api.v1.models import (
    cleanup_response,
    download_parser,
    download_response,
    error_response,
    file_list_response,
    storage_stats_response,
    upload_parser,
    upload_response,
)

# =============================================================================
# Helpers
# =============================================================================


def _get_file_service() -> FileService:
    file_service = getattr(current_app, "file_service", None)
    if file_service is None:
        reason = getattr(current_app, "storage_error", None)
        raise ConfigurationError(reason or "Storage not initialized")
    return file_service


def _resolve_identity(required: bool = False) -> Optional[Identity]:
    auth_service: Optional[AuthService] = getattr(current_app, "auth_service", None)
    if auth_service is None:
        auth_service = AuthService()
    return auth_service.resolve_identity(
        request.headers.get("Authorization"), required=required
    )


def _domain_error_response(error: DomainError, operation: str):
    body, status_code = error_response_from(error)
    if status_code >= 500:
        current_app.logger.error(f"{operation} failed: {error}")
    else:
        current_app.logger.info(f"{operation} rejected ({status_code}): {error}")
    return body, status_code


def _unexpected_error_response(error: Exception, operation: str):
    current_app.logger.exception(f"Unexpected error in {operation}: {error}")
    return create_error_response(
        ErrorCategory.SYSTEM_ERROR, f"{operation} failed: {error}"
    )


def _read_uploaded_file():
    """Return (filename, content, content_type) of the first non-empty file part."""
    try:
        parts = list(request.files.values())
    except RequestEntityTooLarge:
        limit = current_app.config.get("MAX_CONTENT_LENGTH") or 0
        raise InvalidInputError(
            f"File too large, the upload limit is {format_bytes(limit)}"
        ) from None

    for part in parts:
        content = part.read()
        if content:
            return part.filename, content, part.mimetype
    raise InvalidInputError("No file provided")


# =============================================================================
# Files Namespace - Upload, retrieval, listing, cleanup and usage
# =============================================================================

files_ns = Namespace("files", description="Temporary file operations")


@files_ns.route("/upload")
class FileUpload(Resource):
    """Upload a file"""

    @files_ns.doc("upload_file", security="bearer")
    @files_ns.expect(upload_parser)
    @files_ns.response(200, "Success", upload_response)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(401, "Unauthorized", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def post(self):
        """
        Upload a file

        Accepts one file in a multipart body. The file expires 24 hours after
        upload. With a bearer token the file is stored in the caller's namespace.
        """
        try:
            file_service = _get_file_service()
            identity = _resolve_identity()
            filename, content, content_type = _read_uploaded_file()

            result = file_service.upload_file(filename, content, content_type, identity)
            return result.to_dict(), 200

        except DomainError as e:
            return _domain_error_response(e, "Upload")
        except Exception as e:
            return _unexpected_error_response(e, "Upload")


@files_ns.route("/download")
class FileDownload(Resource):
    """Resolve a file identifier to a download URL"""

    @files_ns.doc("get_download_url", security="bearer")
    @files_ns.expect(download_parser)
    @files_ns.response(200, "Success", download_response)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(401, "Unauthorized", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "File Expired", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def get(self):
        """
        Get a time-limited download URL

        Expired files are deleted when they are requested and answer 410.
        """
        try:
            file_service = _get_file_service()
            file_id = request.args.get("fileId", "").strip()
            if not file_id:
                raise InvalidInputError("fileId parameter required")
            identity = _resolve_identity()

            link = file_service.get_download_link(file_id, identity)
            return link.to_dict(), 200

        except DomainError as e:
            return _domain_error_response(e, "Download")
        except Exception as e:
            return _unexpected_error_response(e, "Download")


@files_ns.route("/")
class FileList(Resource):
    """List uploaded files"""

    @files_ns.doc("list_files", security="bearer")
    @files_ns.response(200, "Success", file_list_response)
    @files_ns.response(401, "Unauthorized", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def get(self):
        """
        List files in the caller's namespace

        Expired files are listed with isExpired set; listing never deletes.
        """
        try:
            file_service = _get_file_service()
            identity = _resolve_identity()

            listing = file_service.list_files(identity)
            return listing.to_dict(), 200

        except DomainError as e:
            return _domain_error_response(e, "List files")
        except Exception as e:
            return _unexpected_error_response(e, "List files")


@files_ns.route("/cleanup")
class FileCleanup(Resource):
    """Delete expired files"""

    @files_ns.doc("cleanup_expired_files")
    @files_ns.response(200, "Success", cleanup_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def post(self):
        """
        Sweep all uploads and delete the expired ones

        Intended for schedulers; covers every namespace.
        """
        try:
            file_service = _get_file_service()
            report = file_service.cleanup_expired_files()
            return report.to_dict(), 200

        except DomainError as e:
            return _domain_error_response(e, "Cleanup")
        except Exception as e:
            return _unexpected_error_response(e, "Cleanup")


@files_ns.route("/stats")
class StorageStatsResource(Resource):
    """Storage usage of the authenticated caller"""

    @files_ns.doc("get_storage_stats", security="bearer")
    @files_ns.response(200, "Success", storage_stats_response)
    @files_ns.response(401, "Unauthorized", error_response)
    @files_ns.response(500, "Internal Server Error", error_response)
    def get(self):
        """
        Get storage usage against the per-user quota

        Requires a bearer token.
        """
        try:
            file_service = _get_file_service()
            identity = _resolve_identity(required=True)

            stats = file_service.get_storage_stats(identity)
            return stats.to_dict(), 200

        except DomainError as e:
            return _domain_error_response(e, "Storage stats")
        except Exception as e:
            return _unexpected_error_response(e, "Storage stats")


@files_ns.route("/content/<path:key>")
@files_ns.param("key", "Storage key of the object")
class FileContent(Resource):
    """Serve objects of the local filesystem backend"""

    @files_ns.doc("get_file_content")
    @files_ns.response(200, "File content")
    @files_ns.response(403, "Invalid or expired signature", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    def get(self, key):
        """
        Download file content through a signed URL

        Only available when files are stored on the local filesystem.
        """
        signer = getattr(current_app, "signed_url_service", None)
        if signer is None:
            return create_error_response(ErrorCategory.FILE_NOT_FOUND)

        if not signer.validate(key, request.args.get("signature"), request.args.get("expires")):
            return create_error_response(
                ErrorCategory.UNAUTHORIZED,
                status_code=403,
                message="Invalid or expired signature",
            )

        try:
            storage = _get_file_service().storage
            content = storage.read(key)
            if content is None:
                return create_error_response(ErrorCategory.FILE_NOT_FOUND)

            download_name = key.rpartition("/")[2].split("-", 2)[-1]
            return send_file(
                BytesIO(content),
                mimetype=storage.content_type(key) or "application/octet-stream",
                as_attachment=True,
                download_name=download_name,
            )

        except DomainError as e:
            return _domain_error_response(e, "File content")
        except Exception as e:
            return _unexpected_error_response(e, "File content")
