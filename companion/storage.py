"""Tabular store: six named tables behind insert/update/select operations."""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import (
    Boolean, Column, DateTime, Float, Integer, JSON, MetaData, String, Table, Text,
    create_engine, select, update,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from companion.errors import StorageError

log = logging.getLogger(__name__)

metadata = MetaData()

profiles = Table(
    "profiles", metadata,
    Column("id", String, primary_key=True),
    Column("email", String, unique=True, index=True, nullable=False),
    Column("full_name", String, nullable=False),
    Column("college_name", String, default=""),
    Column("years_experience", Integer, default=0),
    Column("profile_picture_url", String),
    Column("research_publications", JSON),  # [{"title", "year", "journal"}]
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

courses = Table(
    "courses", metadata,
    Column("id", String, primary_key=True),
    Column("faculty_id", String, index=True, nullable=False),
    Column("course_name", String, nullable=False),
    Column("course_code", String, nullable=False),
    Column("semester", String),
    Column("attendance_percentage", Float, default=0),
    Column("syllabus_percentage", Float, default=0),
    Column("compliance_percentage", Float, default=0),
    Column("status", String, default="pending"),  # compliant | pending | at-risk
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

attendance_records = Table(
    "attendance_records", metadata,
    Column("id", String, primary_key=True),
    Column("course_id", String, index=True, nullable=False),
    Column("previous_percentage", Float),
    Column("new_percentage", Float),
    Column("reason", Text),
    Column("modified_by", String),
    Column("modified_at", DateTime(timezone=True)),
)

csv_uploads = Table(
    "csv_uploads", metadata,
    Column("id", String, primary_key=True),
    Column("faculty_id", String, index=True, nullable=False),
    Column("course_id", String),
    Column("file_name", String),
    Column("file_type", String),  # attendance | syllabus
    Column("status", String),  # success | failed | processing
    Column("error_message", Text),
    Column("uploaded_at", DateTime(timezone=True)),
)

reminders = Table(
    "reminders", metadata,
    Column("id", String, primary_key=True),
    Column("faculty_id", String, index=True, nullable=False),
    Column("course_id", String),
    Column("message", Text),
    Column("tone", String),  # gentle | formal | escalation
    Column("is_read", Boolean, default=False),
    Column("created_at", DateTime(timezone=True)),
)

announcements = Table(
    "announcements", metadata,
    Column("id", String, primary_key=True),
    Column("faculty_id", String, index=True, nullable=False),
    Column("course_id", String),
    Column("title", String),
    Column("content", Text),
    Column("created_at", DateTime(timezone=True)),
)

# Column stamped with the insert time, per table
CREATED_COLUMNS = {
    "profiles": "created_at",
    "courses": "created_at",
    "attendance_records": "modified_at",
    "csv_uploads": "uploaded_at",
    "reminders": "created_at",
    "announcements": "created_at",
}

# Tables whose rows carry an updated_at column
UPDATED_COLUMNS = {"profiles", "courses"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _jsonable(values: Dict[str, Any]) -> Dict[str, Any]:
    """Unwrap enums into their stored string values."""
    return {k: getattr(v, "value", v) for k, v in values.items()}


class TableStore:
    """
    Generic access to the compliance tables.

    Ids and timestamps are assigned here, never by callers. Every
    SQLAlchemy failure is re-raised as StorageError.
    """

    def __init__(self, engine: Engine, connection: Optional[Connection] = None):
        self.engine = engine
        self._connection = connection

    def init_db(self):
        metadata.create_all(bind=self.engine)

    def _table(self, name: str) -> Table:
        try:
            return metadata.tables[name]
        except KeyError:
            raise StorageError(f"Unknown table: {name}")

    @contextmanager
    def _begin(self) -> Iterator[Connection]:
        if self._connection is not None:
            yield self._connection
            return
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            log.error("Store operation failed: %s", e)
            raise StorageError(f"Storage failure: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator["TableStore"]:
        """Run several operations on one connection; all commit or none do."""
        if self._connection is not None:
            yield self
            return
        try:
            with self.engine.begin() as conn:
                yield TableStore(self.engine, connection=conn)
        except SQLAlchemyError as e:
            log.error("Store transaction failed: %s", e)
            raise StorageError(f"Storage failure: {e}") from e

    def insert(self, table_name: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""
        table = self._table(table_name)
        row = _jsonable(values)
        row.setdefault("id", str(uuid.uuid4()))
        now = _now()
        row[CREATED_COLUMNS[table_name]] = now
        if table_name in UPDATED_COLUMNS:
            row["updated_at"] = now
        with self._begin() as conn:
            conn.execute(table.insert().values(**row))
            stored = conn.execute(select(table).where(table.c.id == row["id"])).mappings().first()
        return dict(stored)

    def update(self, table_name: str, row_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update one row by id; returns the new row or None when no row matched."""
        table = self._table(table_name)
        row = _jsonable(values)
        if table_name in UPDATED_COLUMNS:
            row["updated_at"] = _now()
        with self._begin() as conn:
            result = conn.execute(update(table).where(table.c.id == row_id).values(**row))
            if result.rowcount == 0:
                return None
            stored = conn.execute(select(table).where(table.c.id == row_id)).mappings().first()
        return dict(stored)

    def update_where(self, table_name: str, filters: Dict[str, Any], values: Dict[str, Any]) -> int:
        """Update every row matching the equality filters; returns the row count."""
        table = self._table(table_name)
        row = _jsonable(values)
        if table_name in UPDATED_COLUMNS:
            row["updated_at"] = _now()
        stmt = update(table).values(**row)
        for column, value in _jsonable(filters).items():
            stmt = stmt.where(table.c[column] == value)
        with self._begin() as conn:
            return conn.execute(stmt).rowcount

    def get(self, table_name: str, row_id: str) -> Optional[Dict[str, Any]]:
        rows = self.select(table_name, filters={"id": row_id}, limit=1)
        return rows[0] if rows else None

    def select(
        self,
        table_name: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Select rows matching equality filters, optionally ordered and limited."""
        table = self._table(table_name)
        stmt = select(table)
        for column, value in _jsonable(filters or {}).items():
            stmt = stmt.where(table.c[column] == value)
        if order_by:
            column = table.c[order_by]
            # id breaks ties between rows stamped with the same time
            if descending:
                stmt = stmt.order_by(column.desc(), table.c.id.desc())
            else:
                stmt = stmt.order_by(column.asc(), table.c.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._begin() as conn:
            return [dict(r) for r in conn.execute(stmt).mappings().all()]


def create_store(database_url: str) -> TableStore:
    """Create a store for a SQLAlchemy URL and make sure the tables exist."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection so every session sees the same in-memory database
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    elif database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False}, future=True)
    else:
        engine = create_engine(database_url, future=True, pool_pre_ping=True)
    store = TableStore(engine)
    store.init_db()
    return store
