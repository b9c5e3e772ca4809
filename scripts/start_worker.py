#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker that consumes both queues and runs the beat
# scheduler in-process. Fine for a single-machine deployment; run a
# separate `celery beat` when there is more than one worker.
#
# Usage:
#   python scripts/start_worker.py
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

import logging

from workers.celery_app import celery_app

logger = logging.getLogger(__name__)


def main():
    """Start the Celery worker with embedded beat."""
    logger.info("Starting Lumate worker (queues: default, sync; beat embedded)")

    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        "--concurrency=2",
        "--queues=default,sync",
        "--beat",
    ])


if __name__ == "__main__":
    main()
