from __future__ import annotations

import logging
import sqlite3
from datetime import timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from models.sketch import SketchRecord

from .database import get_conn
from .predicates import Equals, Everything, Predicate
from .schema import SKETCH_COLUMNS

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = ", ".join(SKETCH_COLUMNS)
_UPDATE_COLUMNS = [column for column in SKETCH_COLUMNS if column != "id"]


class StorageFailure(Exception):
    """The catalog database could not complete a read or write."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def record_to_row(record: SketchRecord) -> Dict[str, Any]:
    return {
        "id": str(record.id),
        "creation_date": record.creation_date.astimezone(timezone.utc).isoformat(timespec="microseconds"),
        "book_name": record.book_name,
        "chapter": record.chapter,
        "verse": record.verse,
        "book_order": record.book_order,
        "center_word": record.center_word,
        "text_position": record.text_position.value,
        "drawing_data": record.drawing_data,
        "image_data": record.image_data,
        "image_data_dark": record.image_data_dark,
        "shared_drawing_id": str(record.shared_drawing_id) if record.shared_drawing_id else None,
    }


def record_from_row(row) -> SketchRecord:
    data = dict(zip(SKETCH_COLUMNS, tuple(row)))
    return SketchRecord(**data)


class CatalogStore:
    """Sketch persistence over one SQLite connection.

    insert/update/delete are staged in the connection's open transaction and
    become durable on save(). A failed save rolls back, so state committed by
    earlier saves is untouched.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def insert(self, record: SketchRecord) -> None:
        row = record_to_row(record)
        placeholders = ", ".join("?" for _ in SKETCH_COLUMNS)
        self._execute(
            f"INSERT INTO sketch_items ({_SELECT_COLUMNS}) VALUES ({placeholders})",
            [row[column] for column in SKETCH_COLUMNS],
            "insert sketch",
        )

    def fetch(self, predicate: Optional[Predicate] = None) -> List[SketchRecord]:
        """All records matching predicate, oldest first."""
        where, params = (predicate or Everything()).to_sql()
        cursor = self._execute(
            f"SELECT {_SELECT_COLUMNS} FROM sketch_items WHERE {where} ORDER BY creation_date, id",
            params,
            "fetch sketches",
        )
        return [record_from_row(row) for row in cursor.fetchall()]

    def get(self, record_id: UUID) -> Optional[SketchRecord]:
        records = self.fetch(Equals("id", record_id))
        return records[0] if records else None

    def update(self, record: SketchRecord) -> None:
        row = record_to_row(record)
        assignments = ", ".join(f"{column} = ?" for column in _UPDATE_COLUMNS)
        cursor = self._execute(
            f"UPDATE sketch_items SET {assignments} WHERE id = ?",
            [row[column] for column in _UPDATE_COLUMNS] + [row["id"]],
            "update sketch",
        )
        if cursor.rowcount == 0:
            raise StorageFailure(f"Sketch {record.id} no longer exists")

    def delete(self, record: SketchRecord) -> None:
        self._execute("DELETE FROM sketch_items WHERE id = ?", [str(record.id)], "delete sketch")

    def save(self) -> None:
        try:
            self.conn.commit()
        except sqlite3.Error as exc:
            logger.error("Saving catalog changes failed: %s", exc)
            self.rollback()
            raise StorageFailure(f"Could not save changes: {exc}", exc) from exc

    def rollback(self) -> None:
        try:
            self.conn.rollback()
        except sqlite3.Error as exc:
            logger.warning("Rollback failed: %s", exc)

    def _execute(self, sql: str, params: List[Any], action: str) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as exc:
            logger.error("Could not %s: %s", action, exc)
            raise StorageFailure(f"Could not {action}: {exc}", exc) from exc


def get_store():
    """FastAPI dependency that yields a CatalogStore over a request-scoped connection."""
    with get_conn() as conn:
        yield CatalogStore(conn)
