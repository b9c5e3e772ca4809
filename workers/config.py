# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers, including the beat schedule that
# keeps attendance and the directory in step with Luma.
# =============================================================================

from celery.schedules import crontab

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete (not before)
    task_acks_late = True

    # Only prefetch one task at a time
    worker_prefetch_multiplier = 1

    # Task results expire after 1 hour
    result_expires = 3600

    # A full directory refresh pages through every Luma person
    task_time_limit = 1800
    task_soft_time_limit = 1740

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_queues = {
        "default": {
            "exchange": "default",
            "routing_key": "default",
        },
        "sync": {
            "exchange": "sync",
            "routing_key": "sync",
        },
    }

    # Luma calls go to their own queue so they never hold up other work
    task_routes = {
        "workers.tasks.sync_attendance_task": {"queue": "sync"},
        "workers.tasks.refresh_directory_task": {"queue": "sync"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Beat Schedule
    # -------------------------------------------------------------------------

    beat_schedule = {
        # Events that ended in the last week: hourly
        "sync-recent-attendance": {
            "task": "workers.tasks.sync_attendance_task",
            "schedule": crontab(minute=0),
            "kwargs": {"upcoming": False},
        },
        # Upcoming events: every 6 hours
        "sync-upcoming-attendance": {
            "task": "workers.tasks.sync_attendance_task",
            "schedule": crontab(minute=15, hour="*/6"),
            "kwargs": {"upcoming": True},
        },
        # Directory upsert: nightly
        "refresh-directory": {
            "task": "workers.tasks.refresh_directory_task",
            "schedule": crontab(minute=30, hour=3),
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    # -------------------------------------------------------------------------
    # Timezone
    # -------------------------------------------------------------------------

    timezone = "UTC"
    enable_utc = True
