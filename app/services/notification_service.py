"""
Best-effort notification dispatch.

The transition engine collects `Notice` objects while a transition runs and
hands them over only after the transaction has committed. Each notice is
stored as a notification row (in its own short transaction) and, when SMTP
is configured, mailed to the student. Any failure is logged and returned as
a warning string; nothing here ever raises into the caller.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from app.core.config import get_settings
from app.db.postgres import run_in_transaction
from app.repositories.notifications import notification_repository
from app.services import email_service

logger = logging.getLogger(__name__)


@dataclass
class Notice:
    student_id: int
    message: str
    type: str = "info"
    admin_id: Optional[int] = None
    email_to: Optional[str] = None
    # (subject, body) from one of the email_service templates
    email: Optional[Tuple[str, str]] = None


class NotificationDispatcher:
    def store(self, notice: Notice) -> int:
        return run_in_transaction(notification_repository.insert, {
            "student_id": notice.student_id,
            "admin_id": notice.admin_id,
            "message": notice.message,
            "type": notice.type,
        })

    def send(self, notice: Notice) -> None:
        subject, body = notice.email
        email_service.send_email(notice.email_to, subject, body)

    def dispatch(self, notices: Iterable[Notice]) -> List[str]:
        warnings = []
        email_on = get_settings().smtp_configured

        for notice in notices:
            try:
                self.store(notice)
            except Exception as e:
                logger.warning("Notification for student %s not stored: %s", notice.student_id, e)
                warnings.append(f"Notification for student {notice.student_id} could not be stored")

            if not (email_on and notice.email and notice.email_to):
                continue
            try:
                self.send(notice)
            except Exception as e:
                logger.warning("Email to %s failed: %s", notice.email_to, e)
                warnings.append(f"Email to {notice.email_to} could not be sent")

        return warnings


dispatcher = NotificationDispatcher()
