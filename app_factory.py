"""
Application Factory

Creates and configures the Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
import os
from datetime import datetime
from typing import Callable, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from filedrop.application import AuthService, DependencyContainer, FileService
from filedrop.application.file_service import utcnow
from filedrop.config import AuthConfig
from filedrop.domain.errors import DomainError
from filedrop.domain.file_storage import IFileStorageRepository
from filedrop.domain.identity import IIdentityProvider
from filedrop.infrastructure import (
    IdentityProviderFactory,
    LocalFileStorageRepository,
    StorageFactory,
)

logger = logging.getLogger(__name__)


class AppConfig:
    """Settings read by the application factory."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.max_content_length = int(os.getenv("MAX_CONTENT_LENGTH", 100 * 1024 * 1024))

        # Celery is only needed by workers and beat; the API runs without a broker
        self.celery_enabled = os.getenv("CELERY_ENABLED", "true").lower() == "true"


def create_app(
    config: Optional[AppConfig] = None,
    storage: Optional[IFileStorageRepository] = None,
    identity_provider: Optional[IIdentityProvider] = None,
    clock: Callable[[], datetime] = utcnow,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        storage: Storage backend, built from the environment if None
        identity_provider: Identity provider, built from the environment if None
        clock: Current-time source for expiration checks

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_length

    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"],
                "max_age": 3600,
            }
        },
    )

    _initialize_services(app, storage, identity_provider, clock)

    if config.celery_enabled:
        _initialize_celery(app)
    else:
        app.celery = None

    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_services(
    app: Flask,
    storage: Optional[IFileStorageRepository],
    identity_provider: Optional[IIdentityProvider],
    clock: Callable[[], datetime],
) -> None:
    """
    Build the storage backend, identity provider and application services
    once per process and attach them to the app.

    Missing configuration does not stop the app from starting: the affected
    service is left as None and handlers answer 500 "not initialized".
    """
    container = DependencyContainer()
    app.container = container
    app.file_service = None
    app.storage_error = None
    app.signed_url_service = None

    if identity_provider is None:
        try:
            identity_provider = IdentityProviderFactory.create_provider()
        except DomainError as e:
            logger.warning(f"Identity provider not initialized: {e}")
    if identity_provider is not None:
        container.register(IIdentityProvider, identity_provider)

    auth_service = AuthService(
        identity_provider=identity_provider,
        require_auth=AuthConfig().require_auth,
    )
    container.register(AuthService, auth_service)
    app.auth_service = auth_service

    if storage is None:
        try:
            storage = StorageFactory.create_storage()
        except DomainError as e:
            logger.warning(f"Storage not initialized: {e}")
            app.storage_error = str(e)
            return
        except Exception as e:
            logger.exception(f"Storage initialization failed: {e}")
            app.storage_error = f"Storage not initialized: {e}"
            return

    container.register(IFileStorageRepository, storage)

    file_service = FileService(storage, clock=clock)
    container.register(FileService, file_service)
    app.file_service = file_service

    # The local backend serves content through a signed endpoint
    if isinstance(storage, LocalFileStorageRepository):
        app.signed_url_service = storage.signed_url_service

    logger.info(f"Application services initialized with {type(storage).__name__}")


def _initialize_celery(app: Flask) -> None:
    """Attach a Celery instance bound to the Flask app context."""
    try:
        from filedrop.config.celery_config import make_celery

        app.celery = make_celery(app)
        logger.info("Celery initialized successfully")
    except Exception as e:
        logger.warning(f"Could not initialize Celery: {e}")
        app.celery = None


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from filedrop.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Summarize which services were initialized at startup.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "storage": "initialized",
        "identity_provider": "not_configured",
        "celery": "unavailable",
    }

    if getattr(app, "file_service", None) is None:
        health_status["storage"] = "not_initialized"
        health_status["status"] = "degraded"

    auth_service = getattr(app, "auth_service", None)
    if auth_service is not None and auth_service.identity_provider is not None:
        health_status["identity_provider"] = "configured"

    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Report whether storage, identity verification and Celery are wired.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
