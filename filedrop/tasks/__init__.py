"""
Celery Tasks

Background tasks for the file service.
"""

from .cleanup_task import cleanup_expired_files

__all__ = ['cleanup_expired_files']
