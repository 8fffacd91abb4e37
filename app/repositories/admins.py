from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.repositories.base import Repository


class AdminRepository(Repository):
    entity = "Admin"
    table = "admins"
    alias = "ad"
    id_column = "admin_id"
    columns = ("username", "email", "password_hash", "role", "is_active")
    required = ("username", "email", "password_hash")
    filters = {"role": "ad.role = :role"}
    search_columns = ("ad.username", "ad.email")
    # password_hash never leaves the repository through reads
    select_columns = "ad.admin_id, ad.username, ad.email, ad.role, ad.is_active, ad.last_login, ad.created_at"

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        self.ensure_unique(db, "admins", "username", payload["username"], self.entity)
        self.ensure_unique(db, "admins", "email", payload["email"], self.entity)

    def find_for_login(self, db: Session, identifier: str) -> Optional[dict]:
        """Look an admin up by username or email, including the password hash."""
        rows = self.fetch(db, """
            SELECT admin_id, username, email, role, is_active, password_hash
            FROM admins
            WHERE LOWER(username) = LOWER(:identifier) OR LOWER(email) = LOWER(:identifier)
        """, {"identifier": identifier})
        return rows[0] if rows else None

    def touch_last_login(self, db: Session, admin_id: int) -> None:
        db.execute(
            text("UPDATE admins SET last_login = CURRENT_TIMESTAMP WHERE admin_id = :id"),
            {"id": admin_id},
        )


admin_repository = AdminRepository()
