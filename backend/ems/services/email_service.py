"""Queue producer for notification emails.

Renders a template and hands the job to the broker by task name; the worker
in ems.tasks.email_tasks does the actual delivery.
"""
import logging

from ems.services.email_templates import (
    build_welcome_email, build_password_reset_email, build_attendance_email,
)
from ems.tasks.email_tasks import WELCOME_TASK, PASSWORD_RESET_TASK, ATTENDANCE_TASK

logger = logging.getLogger(__name__)


class EmailService:
    """`queue` is anything with Celery's send_task(name, args=...) signature."""

    def __init__(self, queue):
        self.queue = queue

    def _enqueue(self, task_name, job):
        result = self.queue.send_task(task_name, args=[job])
        logger.info(
            "Queued %s email to %s (job %s)",
            job["metadata"]["type"], job["to"], getattr(result, "id", None),
        )
        return result

    def queue_welcome_email(self, user, plain_password=None):
        return self._enqueue(WELCOME_TASK, build_welcome_email(user, plain_password))

    def queue_password_reset_email(self, user, reset_token):
        return self._enqueue(PASSWORD_RESET_TASK, build_password_reset_email(user, reset_token))

    def queue_attendance_email(self, attendance, user):
        return self._enqueue(ATTENDANCE_TASK, build_attendance_email(attendance, user))


def get_email_service():
    """FastAPI dependency; tests override it with a recording fake."""
    from ems.celery_app import celery_app
    return EmailService(celery_app)
