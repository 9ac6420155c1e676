"""
API Models for request parsing and Swagger documentation
"""

from flask_restx import fields
from werkzeug.datastructures import FileStorage

from filedrop.api.v1 import api

# =============================================================================
# Request Parsers
# =============================================================================

upload_parser = api.parser()
upload_parser.add_argument(
    "file", location="files", type=FileStorage, required=True, help="File to upload"
)

download_parser = api.parser()
download_parser.add_argument(
    "fileId", location="args", type=str, required=True, help="Identifier returned by upload"
)

# =============================================================================
# Response Models
# =============================================================================

upload_response = api.model(
    "UploadResponse",
    {
        "message": fields.String(example="File uploaded successfully"),
        "fileId": fields.String(description="Upload identifier", example="1712345678901-k3j4h5g6f7a8b9c0"),
        "downloadUrl": fields.String(description="Time-limited download URL"),
        "expiresAt": fields.Integer(description="Expiration as epoch milliseconds"),
        "userId": fields.String(description="Owner, for authenticated uploads"),
    },
)

download_response = api.model(
    "DownloadResponse",
    {
        "downloadUrl": fields.String(description="Time-limited download URL"),
        "fileName": fields.String(description="Stored (sanitized) file name"),
        "expiresAt": fields.Integer(description="Expiration as epoch milliseconds", allow_null=True),
        "originalFileName": fields.String(description="Unsanitized name, when recorded at upload"),
    },
)

file_entry = api.model(
    "FileEntry",
    {
        "fileId": fields.String(),
        "fileName": fields.String(),
        "expiresAt": fields.Integer(allow_null=True),
        "isExpired": fields.Boolean(),
        "size": fields.Integer(),
        "uploadedAt": fields.String(description="ISO-8601 creation time", allow_null=True),
    },
)

file_list_response = api.model(
    "FileListResponse",
    {"files": fields.List(fields.Nested(file_entry))},
)

cleanup_entry = api.model(
    "CleanupEntry",
    {
        "name": fields.String(),
        "size": fields.Integer(),
        "expiresAt": fields.String(allow_null=True),
    },
)

cleanup_response = api.model(
    "CleanupResponse",
    {
        "message": fields.String(),
        "deletedFiles": fields.Integer(),
        "remainingFiles": fields.Integer(),
        "files": fields.List(fields.Nested(cleanup_entry)),
        "error": fields.String(description="Batch delete failure, if any"),
    },
)

formatted_sizes = api.model(
    "FormattedSizes",
    {
        "used": fields.String(example="1.5 MB"),
        "max": fields.String(example="500 MB"),
        "remaining": fields.String(example="498.5 MB"),
    },
)

storage_stats_response = api.model(
    "StorageStatsResponse",
    {
        "totalSize": fields.Integer(),
        "maxSize": fields.Integer(),
        "remainingSize": fields.Integer(),
        "usedPercentage": fields.Float(),
        "fileCount": fields.Integer(),
        "formatted": fields.Nested(formatted_sizes),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error message"),
        "category": fields.String(description="Error category"),
        "title": fields.String(description="Error title"),
    },
)
