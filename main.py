"""
main.py

Flask backend for FileDrop, a temporary file sharing service.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, google-cloud-storage, boto3, celery
  - Infrastructure: an object storage bucket (GCS/Firebase or S3-compatible),
    or a local directory for development; Redis only for the Celery beat sweep

Notes:
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Uses application factory pattern for better testability
"""

import os

from app_factory import create_app
from filedrop.config import configure_logging

configure_logging()

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "true").lower() == "true"

    app.run(host=host, port=port, debug=debug)
