"""
Celery Configuration

Broker settings and the beat schedule for the periodic expired-file sweep.
The API process never needs a broker; only `celery worker` and `celery beat`
connect to one.
"""

import os
from datetime import timedelta

from celery import Celery, Task
from flask import Flask
from kombu import Queue

CLEANUP_TASK_NAME = "filedrop.tasks.cleanup_expired_files"
CLEANUP_QUEUE = "maintenance"


def _cleanup_interval() -> timedelta:
    return timedelta(seconds=float(os.getenv("CLEANUP_INTERVAL_SECONDS", 3600)))


class CeleryConfig:
    """Settings loaded with ``config_from_object``."""

    broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ("json",)
    timezone = "UTC"

    # Sweep results are logged by the worker, nobody polls for them
    task_ignore_result = True

    task_default_queue = "default"
    task_queues = (
        Queue("default"),
        Queue(CLEANUP_QUEUE, routing_key="maintenance.cleanup"),
    )
    task_routes = {
        CLEANUP_TASK_NAME: {"queue": CLEANUP_QUEUE, "routing_key": "maintenance.cleanup"},
    }

    beat_schedule = {
        "cleanup-expired-files": {
            "task": CLEANUP_TASK_NAME,
            "schedule": _cleanup_interval(),
            # A sweep that waited a full interval in the queue is superseded by the next one
            "options": {"expires": _cleanup_interval().total_seconds()},
        },
    }


def make_celery(app: Flask) -> Celery:
    """
    Build the Celery app bound to a Flask application.

    Every task body runs inside ``app.app_context()`` so it can reach the
    services attached to the Flask app.
    """

    class FlaskTask(Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery = Celery(app.import_name, task_cls=FlaskTask)
    celery.config_from_object(CeleryConfig)
    app.extensions["celery"] = celery
    return celery
