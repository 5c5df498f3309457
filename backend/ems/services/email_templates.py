"""Email templates - pure functions returning {to, subject, html, metadata}.

Rendering never talks to the queue or to Mailgun; EmailService feeds the
result to the worker.
"""
from datetime import datetime, timezone
from html import escape

from ems.core.config import settings
from ems.models.attendance import AttendanceStatus, working_hours

SYSTEM_NAME = "Employee Management System"
TEAM_SIGNATURE = "The Employee Management Team"

# Header gradients per template
WELCOME_GRADIENT = "linear-gradient(135deg, #667eea 0%, #764ba2 100%)"
REGISTRATION_GRADIENT = "linear-gradient(135deg, #10b981 0%, #059669 100%)"
RESET_GRADIENT = "linear-gradient(135deg, #f97316 0%, #ea580c 100%)"

STATUS_STYLE = {
    AttendanceStatus.PRESENT.value: ("#16a34a", "&#9989;"),
    AttendanceStatus.LATE.value: ("#d97706", "&#9888;&#65039;"),
    AttendanceStatus.ABSENT.value: ("#dc2626", "&#10060;"),
    AttendanceStatus.LEAVE.value: ("#2563eb", "&#127958;&#65039;"),
}


# ── HTML helpers ─────────────────────────────────────────────────────

def _btn(url, bg, label):
    return (
        '<a href="' + escape(url, quote=True) + '" style="display:inline-block; background:' + bg
        + '; color:#fff; padding:12px 30px; border-radius:25px; text-decoration:none;'
        + ' font-weight:bold; margin:20px 0;">' + label + "</a>"
    )


def _row(label, value):
    return (
        '<tr><td style="padding:10px 0; font-weight:bold; color:#4b5563; border-bottom:1px solid #e5e7eb;">'
        + label + '</td><td style="padding:10px 0; color:#111827; border-bottom:1px solid #e5e7eb;">'
        + escape(str(value)) + "</td></tr>"
    )


def _open(title, gradient, heading):
    return [
        "<!DOCTYPE html>",
        '<html><head><meta charset="UTF-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
        "<title>" + title + "</title></head>",
        '<body style="font-family:Arial, sans-serif; line-height:1.6; color:#333;'
        ' max-width:600px; margin:0 auto; padding:20px;">',
        '<div style="background:' + gradient + '; color:#fff; padding:30px 20px;'
        ' text-align:center; border-radius:10px 10px 0 0;">',
        "<h1>" + heading + "</h1>",
        "</div>",
        '<div style="background:#f9f9f9; padding:30px; border:1px solid #e0e0e0;'
        ' border-top:none; border-radius:0 0 10px 10px;">',
    ]


def _close():
    year = datetime.now(timezone.utc).year
    return [
        "<p>Best regards,<br>" + TEAM_SIGNATURE + "</p>",
        "</div>",
        '<div style="margin-top:30px; padding-top:20px; border-top:1px solid #e0e0e0;'
        ' color:#666; font-size:12px; text-align:center;">',
        "<p>This is an automated message. Please do not reply to this email.</p>",
        "<p>&copy; " + str(year) + " " + SYSTEM_NAME + ". All rights reserved.</p>",
        "</div></body></html>",
    ]


def _metadata(kind, user, **extra):
    meta = {
        "type": kind,
        "user_id": user.id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    meta.update(extra)
    return meta


def _fmt_time(t):
    return t.strftime("%H:%M:%S") if t else "Not recorded"


# ── Welcome ──────────────────────────────────────────────────────────

def build_welcome_email(user, plain_password=None):
    """Admin-created accounts get their credentials; self-registrations get a confirmation."""
    login_url = settings.APP_URL + "/login"
    name = escape(user.first_name + " " + user.last_name)
    employee_id = escape(user.employee_identifier or "Not assigned")

    if plain_password:
        subject = "Welcome to " + SYSTEM_NAME + " - Your Account Credentials"
        h = _open("Welcome to " + SYSTEM_NAME, WELCOME_GRADIENT, "Welcome to " + SYSTEM_NAME)
        h.append("<h2>Hello " + name + ",</h2>")
        h.append("<p>Your employee account has been created successfully. Here are your login credentials:</p>")
        h.append('<div style="background:#fff; border:2px dashed #667eea; border-radius:8px; padding:20px; margin:20px 0;">')
        h.append('<table style="width:100%; border-collapse:collapse;">')
        h.append(_row("Email:", user.email))
        h.append(_row("Password:", plain_password))
        h.append(_row("Employee ID:", user.employee_identifier or "Not assigned"))
        h.append(_row("Role:", user.role))
        h.append("</table></div>")
        h.append(
            '<div style="background:#fff3cd; border:1px solid #ffeaa7; color:#856404;'
            ' padding:15px; border-radius:5px; margin:20px 0;">'
            "<strong>Important:</strong> For security reasons, please change your password after first login."
            "</div>"
        )
        h.append("<p>You can now access the system using these credentials:</p>")
        h.append(_btn(login_url, WELCOME_GRADIENT, "Login to Your Account"))
        h.append("<p>If you have any questions or need assistance, please contact your administrator or HR department.</p>")
        kind = "employee_welcome"
    else:
        subject = "Welcome to " + SYSTEM_NAME + " - Registration Successful"
        h = _open("Registration Successful", REGISTRATION_GRADIENT, "Registration Successful!")
        h.append("<h2>Hello " + name + ",</h2>")
        h.append(
            "<p>Thank you for registering with " + SYSTEM_NAME
            + ". Your account has been created successfully.</p>"
        )
        h.append("<p><strong>Email:</strong> " + escape(user.email) + "</p>")
        h.append("<p><strong>Employee ID:</strong> " + employee_id + "</p>")
        h.append("<p>You can now login to the system and start using all features:</p>")
        h.append(_btn(login_url, REGISTRATION_GRADIENT, "Login to Your Account"))
        h.append("<p>If you have any questions, please contact our support team.</p>")
        kind = "registration_welcome"

    h.extend(_close())

    return {
        "to": user.email,
        "subject": subject,
        "html": "\n".join(h),
        "metadata": _metadata(kind, user),
    }


# ── Password reset ───────────────────────────────────────────────────

def build_password_reset_email(user, reset_token):
    reset_url = settings.APP_URL + "/reset-password?token=" + reset_token
    expire_minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
    if expire_minutes % 60 == 0:
        hours = expire_minutes // 60
        expiry = "1 hour" if hours == 1 else str(hours) + " hours"
    else:
        expiry = str(expire_minutes) + " minutes"

    h = _open("Password Reset Request", RESET_GRADIENT, "Password Reset Request")
    h.append("<h2>Hello " + escape(user.first_name) + ",</h2>")
    h.append("<p>You requested to reset your password. Click the button below to reset it:</p>")
    h.append(_btn(reset_url, RESET_GRADIENT, "Reset Password"))
    h.append(
        '<div style="background:#fef3c7; border:1px solid #fde68a; color:#92400e;'
        ' padding:15px; border-radius:5px; margin:20px 0;">'
        "<strong>This link will expire in " + expiry + ".</strong></div>"
    )
    h.append("<p>Or copy and paste this link in your browser:</p>")
    h.append(
        '<div style="background:#f3f4f6; padding:10px; border-radius:5px;'
        ' font-family:monospace; word-break:break-all;">' + escape(reset_url) + "</div>"
    )
    h.append(
        "<p>If you didn't request this password reset, please ignore this email."
        " Your password will remain unchanged.</p>"
    )
    h.extend(_close())

    return {
        "to": user.email,
        "subject": "Password Reset Request - " + SYSTEM_NAME,
        "html": "\n".join(h),
        "metadata": _metadata("password_reset", user),
    }


# ── Attendance notification ──────────────────────────────────────────

def build_attendance_email(attendance, user):
    color, icon = STATUS_STYLE.get(attendance.status, ("#3b82f6", ""))
    day = attendance.date.strftime("%a %b %d %Y")
    hours = working_hours(attendance.clock_in, attendance.clock_out)

    gradient = "linear-gradient(135deg, " + color + " 0%, #1d4ed8 100%)"
    h = _open("Attendance Recorded", gradient, icon + " Attendance Recorded")
    h.append("<h2>Hello " + escape(user.first_name) + ",</h2>")
    h.append("<p>Your attendance has been recorded for <strong>" + day + "</strong>.</p>")
    h.append('<div style="background:#fff; border:2px solid ' + color + '; border-radius:8px; padding:20px; margin:20px 0;">')
    h.append('<table style="width:100%; border-collapse:collapse;">')
    h.append(
        '<tr><td style="padding:10px 0; font-weight:bold; color:#4b5563; border-bottom:1px solid #e5e7eb;">Status:</td>'
        '<td style="padding:10px 0; font-weight:bold; color:' + color + '; border-bottom:1px solid #e5e7eb;">'
        + attendance.status.upper() + "</td></tr>"
    )
    h.append(_row("Clock In:", _fmt_time(attendance.clock_in)))
    h.append(_row("Clock Out:", _fmt_time(attendance.clock_out)))
    h.append(_row("Working Hours:", f"{hours} hours"))
    if attendance.notes:
        h.append(_row("Notes:", attendance.notes))
    h.append("</table></div>")
    h.append("<p>Thank you for your hard work!</p>")
    h.extend(_close())

    return {
        "to": user.email,
        "subject": "Attendance Recorded - " + day,
        "html": "\n".join(h),
        "metadata": _metadata("attendance_notification", user, attendance_id=attendance.id),
    }
