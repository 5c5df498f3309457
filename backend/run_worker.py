#!/usr/bin/env python3
"""
Startup script for the email queue worker.
Equivalent to: celery -A ems.celery_app worker --loglevel=info
"""
import sys
from pathlib import Path

# Add backend directory to path so `ems` imports resolve when run from anywhere
sys.path.insert(0, str(Path(__file__).parent))

from ems.celery_app import celery_app
import ems.tasks.email_tasks  # noqa: F401  registers the email tasks

if __name__ == "__main__":
    celery_app.worker_main(["worker", "--loglevel=info", "-Q", "emails"])
