"""
Outbound email over SMTP.

Templates return (subject, body) pairs in plain text. Sending is only
attempted when `email_enabled` is set and an SMTP host and sender are
configured; callers go through the notification dispatcher, which treats
every failure here as non-fatal.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Tuple

from app.core.config import get_settings

logger = logging.getLogger(__name__)

SIGNATURE = "\n\nBest regards,\nThe Internship Management Team"

STATUS_MESSAGES = {
    "Under Review": "Your application is now being reviewed by our team.",
    "Shortlisted": "Congratulations! You have been shortlisted for the next round.",
    "Selected": "Congratulations! You have been selected for this position.",
    "Rejected": "Unfortunately, we will not be moving forward with your application at this time.",
}


def application_status_email(student_name: str, job_title: str, company_name: str, status: str) -> Tuple[str, str]:
    subject = f"Application Status Update - {job_title}"
    body = (
        f"Hello {student_name},\n\n"
        f"The status of your application for {job_title} at {company_name} "
        f"has been updated to: {status}.\n\n"
        f"{STATUS_MESSAGES.get(status, 'You can track your application status in your dashboard.')}"
        f"{SIGNATURE}"
    )
    return subject, body


def interview_scheduled_email(student_name: str, job_title: str, company_name: str,
                              interview_date, mode: str, location: str = None) -> Tuple[str, str]:
    subject = f"Interview Scheduled - {job_title}"
    when = interview_date.strftime("%Y-%m-%d %H:%M") if hasattr(interview_date, "strftime") else str(interview_date)
    body = (
        f"Hello {student_name},\n\n"
        f"You have an interview for {job_title} at {company_name}.\n\n"
        f"Date and time: {when}\n"
        f"Mode: {mode}\n"
        f"Location: {location or 'To be shared'}\n\n"
        f"Please be available 10 minutes before the scheduled time."
        f"{SIGNATURE}"
    )
    return subject, body


def internship_assignment_email(student_name: str, internship_title: str, company_name: str,
                                start_date, end_date) -> Tuple[str, str]:
    subject = f"Internship Assignment - {internship_title}"
    body = (
        f"Hello {student_name},\n\n"
        f"You have been assigned to the internship {internship_title} at {company_name}, "
        f"running from {start_date} to {end_date}.\n\n"
        f"Your supervisor will contact you with onboarding details."
        f"{SIGNATURE}"
    )
    return subject, body


def send_email(to_email: str, subject: str, body: str) -> None:
    """Send one plain-text message. Raises on any SMTP or network failure."""
    settings = get_settings()
    if not settings.smtp_configured:
        raise RuntimeError("Email is not configured")

    msg = EmailMessage()
    msg["From"] = settings.smtp_from
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=20) as smtp:
        smtp.ehlo()
        if settings.smtp_use_tls:
            smtp.starttls(context=ssl.create_default_context())
            smtp.ehlo()
        if settings.smtp_user:
            smtp.login(settings.smtp_user, settings.smtp_password)
        smtp.send_message(msg)

    logger.info("Email '%s' sent to %s", subject, to_email)
