"""Email queue consumers.

Each job is the rendered template dict {to, subject, html, metadata}. Delivery
failures raise EmailDeliveryError, which Celery retries with exponential
backoff (1s, 2s, ...) until EMAIL_MAX_RETRIES is exhausted.
"""
import logging
from celery import Task
from ems.celery_app import celery_app
from ems.core.config import settings
from ems.core.database import SessionLocal
from ems.core.exceptions import EmailDeliveryError
from ems.models.attendance import Attendance
from ems.services import mailgun

logger = logging.getLogger(__name__)

WELCOME_TASK = "email.welcome"
PASSWORD_RESET_TASK = "email.password_reset"
ATTENDANCE_TASK = "email.attendance_notification"

RETRY_OPTIONS = {
    "autoretry_for": (EmailDeliveryError,),
    "max_retries": settings.EMAIL_MAX_RETRIES,
    "retry_backoff": settings.EMAIL_RETRY_BACKOFF,
    "retry_jitter": False,
    "acks_late": True,
    "ignore_result": True,
}


class EmailTask(Task):
    def on_failure(self, exc, task_id, args, kwargs, einfo):
        job = args[0] if args else kwargs.get("job", {})
        logger.error(
            "Email job %s (%s) to %s failed permanently: %s",
            task_id, self.name, job.get("to"), exc,
        )


def deliver_email(job):
    """Send one rendered job. Skips (no retry) when Mailgun is not configured."""
    metadata = job.get("metadata") or {}
    if not mailgun.mailgun_configured():
        logger.warning(
            "Mailgun not configured - skipping %s email to %s",
            metadata.get("type", "unknown"), job.get("to"),
        )
        return {"success": False, "skipped": True}

    msg_id = mailgun.send_email(job["to"], job["subject"], job["html"])
    logger.info("Delivered %s email to %s", metadata.get("type", "unknown"), job["to"])
    return {"success": True, "message_id": msg_id}


def mark_attendance_email_sent(attendance_id):
    db = SessionLocal()
    try:
        attendance = db.query(Attendance).filter(Attendance.id == attendance_id).first()
        if not attendance:
            logger.warning("Attendance %s vanished before email flag could be set", attendance_id)
            return
        attendance.is_email_sent = True
        db.commit()
    finally:
        db.close()


@celery_app.task(name=WELCOME_TASK, base=EmailTask, **RETRY_OPTIONS)
def send_welcome_email(job: dict):
    return deliver_email(job)


@celery_app.task(name=PASSWORD_RESET_TASK, base=EmailTask, **RETRY_OPTIONS)
def send_password_reset_email(job: dict):
    return deliver_email(job)


@celery_app.task(name=ATTENDANCE_TASK, base=EmailTask, **RETRY_OPTIONS)
def send_attendance_email(job: dict):
    result = deliver_email(job)
    attendance_id = (job.get("metadata") or {}).get("attendance_id")
    if result["success"] and attendance_id is not None:
        mark_attendance_email_sent(attendance_id)
    return result
