"""
Generic repository over one table.

Subclasses declare the table, the writable column set, the allow-listed list
filters and the SELECT used for reads. Every identifier that ends up in SQL
comes from these class attributes; request values only ever travel as bound
parameters.

The same WHERE clause feeds the page query and the COUNT query so that
pagination metadata always describes the filtered set.
"""

import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.postgres import rows_to_dicts

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class Repository:
    entity: str = "Resource"
    table: str = ""
    alias: str = "t"
    id_column: str = "id"
    # Columns accepted by create()/update()
    columns: Tuple[str, ...] = ()
    # Columns that create() requires
    required: Tuple[str, ...] = ()
    # filter name -> predicate using a bind parameter of the same name
    filters: Dict[str, str] = {}
    # columns searched by the free-text `search` filter
    search_columns: Tuple[str, ...] = ()
    select_columns: str = ""
    joins: str = ""
    base_condition: str = "1=1"
    order_by: str = ""

    # ------------------------------------------------------------------
    # SQL fragments
    # ------------------------------------------------------------------

    @property
    def from_clause(self) -> str:
        return f"FROM {self.table} {self.alias} {self.joins}".rstrip()

    @property
    def select_clause(self) -> str:
        return f"SELECT {self.select_columns or self.alias + '.*'} {self.from_clause}"

    def build_where(self, filters: Optional[Dict[str, Any]]) -> Tuple[str, Dict[str, Any]]:
        clauses = [self.base_condition]
        params: Dict[str, Any] = {}

        for name, value in (filters or {}).items():
            if value is None or value == "":
                continue
            if name == "search":
                if not self.search_columns:
                    raise ValidationError.for_field("search", f"{self.entity} list does not support search")
                ors = [f"LOWER({col}) LIKE :search" for col in self.search_columns]
                clauses.append("(" + " OR ".join(ors) + ")")
                params["search"] = f"%{str(value).lower()}%"
                continue
            if name not in self.filters:
                raise ValidationError.for_field(name, f"Unknown filter '{name}'")
            clauses.append(self.filters[name])
            params[name] = value

        return " AND ".join(clauses), params

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, db: Session, filters: Optional[Dict[str, Any]] = None,
             page: int = 1, limit: int = DEFAULT_LIMIT) -> Tuple[List[dict], dict]:
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_LIMIT)
        where, params = self.build_where(filters)

        total = db.execute(
            text(f"SELECT COUNT(*) {self.from_clause} WHERE {where}"), params
        ).scalar() or 0

        order = self.order_by or f"{self.alias}.{self.id_column} DESC"
        rows = rows_to_dicts(db.execute(
            text(f"{self.select_clause} WHERE {where} ORDER BY {order} LIMIT :_limit OFFSET :_offset"),
            {**params, "_limit": limit, "_offset": (page - 1) * limit},
        ))

        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        }
        return rows, pagination

    def find(self, db: Session, entity_id: int) -> Optional[dict]:
        rows = rows_to_dicts(db.execute(
            text(f"{self.select_clause} WHERE {self.alias}.{self.id_column} = :id AND {self.base_condition}"),
            {"id": entity_id},
        ))
        return rows[0] if rows else None

    def get(self, db: Session, entity_id: int) -> dict:
        row = self.find(db, entity_id)
        if row is None:
            raise NotFoundError(self.entity)
        return row

    def exists(self, db: Session, entity_id: int) -> bool:
        return self.find(db, entity_id) is not None

    def count_by_status(self, db: Session) -> Dict[str, int]:
        rows = db.execute(text(
            f"SELECT {self.alias}.status AS status, COUNT(*) AS count {self.from_clause} "
            f"WHERE {self.base_condition} GROUP BY {self.alias}.status"
        )).fetchall()
        return {status: count for status, count in rows}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def before_create(self, db: Session, payload: Dict[str, Any]) -> None:
        """Pre-checks (foreign keys, uniqueness). Raise to refuse the write."""

    def before_update(self, db: Session, current: dict, patch: Dict[str, Any]) -> None:
        """Pre-checks for a patch against the stored row."""

    def before_delete(self, db: Session, current: dict) -> None:
        """Blocking-children checks."""

    def _writable(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(payload) - set(self.columns)
        if unknown:
            raise ValidationError(
                "Validation failed",
                errors=[{"field": f, "message": "Field cannot be written"} for f in sorted(unknown)],
            )
        return dict(payload)

    def insert(self, db: Session, values: Dict[str, Any]) -> int:
        cols = list(values)
        try:
            result = db.execute(
                text(
                    f"INSERT INTO {self.table} ({', '.join(cols)}) "
                    f"VALUES ({', '.join(':' + c for c in cols)}) RETURNING {self.id_column}"
                ),
                values,
            )
            return result.scalar_one()
        except IntegrityError as e:
            raise ConflictError(f"{self.entity} conflicts with an existing record") from e

    def create(self, db: Session, payload: Dict[str, Any]) -> int:
        values = self._writable(payload)
        missing = [c for c in self.required if values.get(c) in (None, "")]
        if missing:
            raise ValidationError(
                "Validation failed",
                errors=[{"field": f, "message": "Field is required"} for f in missing],
            )
        self.before_create(db, values)
        return self.insert(db, values)

    def update(self, db: Session, entity_id: int, patch: Dict[str, Any]) -> None:
        values = self._writable(patch)
        if not values:
            raise ValidationError("No fields to update")

        current = self.get(db, entity_id)
        self.before_update(db, current, values)

        assignments = ", ".join(f"{c} = :{c}" for c in values)
        try:
            db.execute(
                text(
                    f"UPDATE {self.table} SET {assignments}, updated_at = CURRENT_TIMESTAMP "
                    f"WHERE {self.id_column} = :_id"
                ),
                {**values, "_id": entity_id},
            )
        except IntegrityError as e:
            raise ConflictError(f"{self.entity} conflicts with an existing record") from e

    def delete(self, db: Session, entity_id: int) -> None:
        current = self.get(db, entity_id)
        self.before_delete(db, current)
        db.execute(text(f"DELETE FROM {self.table} WHERE {self.id_column} = :id"), {"id": entity_id})

    # ------------------------------------------------------------------
    # Shared pre-check helpers
    # ------------------------------------------------------------------

    @staticmethod
    def ensure_unique(db: Session, table: str, column: str, value: Any, entity: str,
                      id_column: str = None, exclude_id: int = None, extra: str = "") -> None:
        sql = f"SELECT 1 FROM {table} WHERE LOWER({column}) = LOWER(:value)"
        params = {"value": value}
        if exclude_id is not None:
            sql += f" AND {id_column} != :exclude_id"
            params["exclude_id"] = exclude_id
        if extra:
            sql += f" AND {extra}"
        if db.execute(text(sql), params).first():
            raise ConflictError(f"{entity} with this {column.replace('_', ' ')} already exists")

    @staticmethod
    def fetch(db: Session, sql: str, params: Optional[Dict[str, Any]] = None) -> List[dict]:
        return rows_to_dicts(db.execute(text(sql), params or {}))

    @staticmethod
    def count_where(db: Session, sql: str, params: Dict[str, Any]) -> int:
        return db.execute(text(sql), params).scalar() or 0

    @staticmethod
    def status_params(prefix: str, states: Iterable[str]) -> Tuple[str, Dict[str, Any]]:
        """Expand a tuple of states into `:p0, :p1, ...` placeholders."""
        states = list(states)
        names = [f"{prefix}{i}" for i in range(len(states))]
        return ", ".join(":" + n for n in names), dict(zip(names, states))
