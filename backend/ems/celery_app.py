"""Celery application for the email queue (Redis broker, no result backend)."""
import logging
from celery import Celery
from ems.core.config import settings

logger = logging.getLogger(__name__)


def get_celery_config():
    broker = settings.REDIS_URL
    logger.info("Celery broker: Redis at %s", broker.split("@")[-1] if "@" in broker else broker)
    return {
        # Broker settings
        "broker_url": broker,
        "broker_connection_retry_on_startup": True,

        # Results are discarded once a job succeeds
        "task_ignore_result": True,
        "result_backend": None,

        # Serialization
        "task_serializer": "json",
        "accept_content": ["json"],
        "result_serializer": "json",
        "enable_utc": True,

        # Acknowledge after execution so a crashed worker does not lose the job
        "task_acks_late": True,
        "task_reject_on_worker_lost": True,
        "worker_prefetch_multiplier": 1,

        "task_default_queue": "emails",

        # Logging
        "worker_log_format": "[%(asctime)s: %(levelname)s/%(processName)s] %(message)s",
        "worker_task_log_format": "[%(asctime)s: %(levelname)s/%(processName)s][%(task_name)s(%(task_id)s)] %(message)s",

        "imports": ("ems.tasks.email_tasks",),
    }


celery_app = Celery("ems")
celery_app.config_from_object(get_celery_config())
