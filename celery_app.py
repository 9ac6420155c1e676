"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory to ensure all services are properly initialized.
"""

from app_factory import create_app
from filedrop.config import configure_logging

configure_logging()

# Create Flask app with all services initialized (including dependency container)
flask_app = create_app()

# Get Celery instance from Flask app
celery_app = flask_app.celery

# Task modules are imported by name when the worker starts, once
# `celery_app` exists for the shared_task decorators to bind to.
celery_app.conf.imports = ("filedrop.tasks.cleanup_task",)
