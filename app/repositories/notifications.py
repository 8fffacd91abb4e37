from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.repositories.base import Repository

# Bulk-send audiences -> student predicate
RECIPIENT_GROUPS = {
    "all_students": "status != 'Inactive'",
    "available_students": "status = 'Available'",
    "selected_students": "status = 'Selected'",
}


class NotificationRepository(Repository):
    entity = "Notification"
    table = "notifications"
    alias = "n"
    id_column = "notification_id"
    columns = ("student_id", "admin_id", "message", "type", "is_read")
    required = ("message",)
    filters = {
        "student_id": "n.student_id = :student_id",
        "admin_id": "n.admin_id = :admin_id",
        "type": "n.type = :type",
        "is_read": "n.is_read = :is_read",
    }
    search_columns = ("n.message",)
    select_columns = "n.*, s.first_name || ' ' || s.last_name AS student_name, ad.username AS admin_username"
    joins = """LEFT JOIN students s ON n.student_id = s.student_id
        LEFT JOIN admins ad ON n.admin_id = ad.admin_id"""
    order_by = "n.created_at DESC, n.notification_id DESC"

    def _check_references(self, db: Session, values: Dict[str, Any]) -> None:
        errors = []
        if values.get("student_id") is not None and not self.count_where(
            db, "SELECT COUNT(*) FROM students WHERE student_id = :id", {"id": values["student_id"]}
        ):
            errors.append({"field": "student_id", "message": "Student not found"})
        if values.get("admin_id") is not None and not self.count_where(
            db, "SELECT COUNT(*) FROM admins WHERE admin_id = :id", {"id": values["admin_id"]}
        ):
            errors.append({"field": "admin_id", "message": "Admin not found"})
        if errors:
            raise ValidationError("Validation failed", errors=errors)

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self._check_references(db, payload)

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        self._check_references(db, patch)

    def mark_read(self, db: Session, notification_id: int) -> None:
        self.get(db, notification_id)
        db.execute(
            text("UPDATE notifications SET is_read = TRUE, updated_at = CURRENT_TIMESTAMP "
                 "WHERE notification_id = :id"),
            {"id": notification_id},
        )

    def mark_all_read(self, db: Session, student_id: int) -> int:
        result = db.execute(
            text("UPDATE notifications SET is_read = TRUE, updated_at = CURRENT_TIMESTAMP "
                 "WHERE student_id = :sid AND is_read = FALSE"),
            {"sid": student_id},
        )
        return result.rowcount

    def unread_count(self, db: Session, student_id: Optional[int] = None) -> int:
        if student_id is None:
            return self.count_where(db, "SELECT COUNT(*) FROM notifications WHERE is_read = FALSE", {})
        return self.count_where(
            db, "SELECT COUNT(*) FROM notifications WHERE student_id = :sid AND is_read = FALSE",
            {"sid": student_id},
        )

    def recipients(self, db: Session, target: str, student_ids: Optional[List[int]] = None) -> List[int]:
        if target == "specific_students":
            if not student_ids:
                raise ValidationError.for_field("student_ids", "At least one student id is required")
            placeholders, params = self.status_params("s", sorted(set(student_ids)))
            found = [r[0] for r in db.execute(
                text(f"SELECT student_id FROM students WHERE student_id IN ({placeholders}) ORDER BY student_id"),
                params,
            ).fetchall()]
            missing = sorted(set(student_ids) - set(found))
            if missing:
                raise ValidationError.for_field("student_ids", f"Unknown student ids: {missing}")
            return found
        if target not in RECIPIENT_GROUPS:
            raise ValidationError.for_field("target", f"Unknown recipient group '{target}'")
        return [r[0] for r in db.execute(
            text(f"SELECT student_id FROM students WHERE {RECIPIENT_GROUPS[target]} ORDER BY student_id")
        ).fetchall()]

    def bulk_send(self, db: Session, message: str, type_: str, target: str,
                  student_ids: Optional[List[int]] = None, admin_id: Optional[int] = None) -> int:
        recipients = self.recipients(db, target, student_ids)
        for student_id in recipients:
            db.execute(
                text("""
                    INSERT INTO notifications (student_id, admin_id, message, type)
                    VALUES (:sid, :aid, :message, :type)
                """),
                {"sid": student_id, "aid": admin_id, "message": message, "type": type_},
            )
        return len(recipients)

    def counts_by_type(self, db: Session) -> Dict[str, int]:
        rows = db.execute(text("SELECT type, COUNT(*) FROM notifications GROUP BY type")).fetchall()
        return {type_: count for type_, count in rows}


notification_repository = NotificationRepository()
