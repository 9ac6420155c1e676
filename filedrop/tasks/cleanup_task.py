"""
Cleanup Task

Celery beat task for the periodic sweep of expired files.
Thin wrapper that delegates to FileService, the same code path as the
POST /files/cleanup endpoint.
"""

import logging
from typing import Any, Dict

from celery import shared_task
from flask import current_app

from filedrop.application import FileService
from filedrop.config.celery_config import CLEANUP_TASK_NAME
from filedrop.domain.errors import DomainError

logger = logging.getLogger(__name__)


def run_cleanup(file_service: FileService) -> Dict[str, Any]:
    """
    Run one expiry sweep and return cleanup statistics.

    Failures are logged and reported in the result; nothing is retried.
    """
    logger.info("Starting cleanup task")
    try:
        report = file_service.cleanup_expired_files()
    except DomainError as e:
        logger.error(f"Cleanup task failed: {e}", exc_info=True)
        return {"deletedFiles": 0, "remainingFiles": 0, "errors": [str(e)]}

    result = report.to_dict()
    errors = [report.error] if report.error else []
    logger.info(
        f"Cleanup completed - Deleted: {report.deleted_count}, "
        f"Remaining: {len(report.remaining)}, Errors: {len(errors)}"
    )
    return {
        "deletedFiles": result["deletedFiles"],
        "remainingFiles": result["remainingFiles"],
        "errors": errors,
    }


@shared_task(bind=True, name=CLEANUP_TASK_NAME)
def cleanup_expired_files(self):
    """
    Periodic cleanup task that removes expired files from storage.

    Runs inside the Flask app context (see make_celery) and resolves
    FileService from the app's DependencyContainer.

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    container = getattr(current_app, "container", None)
    if container is None or not container.is_registered(FileService):
        error_msg = "Cleanup task skipped: storage not initialized"
        logger.error(error_msg)
        return {"deletedFiles": 0, "remainingFiles": 0, "errors": [error_msg]}

    return run_cleanup(container.resolve(FileService))
