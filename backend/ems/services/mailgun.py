"""Mailgun transport used by the email worker."""
import logging
import requests
from ems.core.config import settings
from ems.core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

MAILGUN_API_BASE = "https://api.mailgun.net/v3/"


def mailgun_configured():
    return bool(settings.MAILGUN_API_KEY and settings.MAILGUN_DOMAIN)


def send_email(to_email, subject, html_body):
    """Send one message via Mailgun.

    Returns the Mailgun message id. Raises EmailDeliveryError on any transport
    failure or non-200 answer so the caller can retry.
    """
    mail_data = {
        "from": settings.MAILGUN_FROM_NAME + " <" + settings.MAILGUN_FROM_EMAIL + ">",
        "to": [to_email],
        "subject": subject,
        "html": html_body,
    }

    try:
        resp = requests.post(
            MAILGUN_API_BASE + settings.MAILGUN_DOMAIN + "/messages",
            auth=("api", settings.MAILGUN_API_KEY),
            data=mail_data,
            timeout=30,
        )
    except requests.RequestException as e:
        logger.error("Failed to reach Mailgun for %s: %s", to_email, e)
        raise EmailDeliveryError(str(e)) from e

    if resp.status_code != 200:
        logger.error("Mailgun error %s: %s", resp.status_code, resp.text)
        raise EmailDeliveryError("Mailgun returned " + str(resp.status_code))

    msg_id = resp.json().get("id", "")
    logger.info("Email sent to %s - msg_id: %s", to_email, msg_id)
    return msg_id
