# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# background syncs against Luma.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (attendance sync, directory refresh)
# - config.py: Worker-specific settings and the beat schedule
#
# Usage:
#   # Start worker and scheduler
#   celery -A workers.celery_app worker --loglevel=info -Q default,sync
#   celery -A workers.celery_app beat --loglevel=info
#
#   # Submit task (from API)
#   from workers.tasks import refresh_directory_task
#   result = refresh_directory_task.delay()
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
