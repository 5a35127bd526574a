import sqlite3
from contextlib import contextmanager
from pathlib import Path

from utils.bible import find_book

from .schema import SCHEMA_SQL, INDEXES_SQL, SCHEMA_VERSION

CONFIG_DIR = Path.home() / ".scripturesketch"
DB_PATH = CONFIG_DIR / "scripturesketch.db"

def init_db():
    """Initialize the database by creating tables and indexes if they don't exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    with get_conn() as conn:
        create_schema(conn)
        conn.commit()

def create_schema(conn: sqlite3.Connection) -> None:
    """Create tables, bring legacy installs up to date and write the schema version."""
    conn.executescript(SCHEMA_SQL)
    ensure_shared_drawing_id(conn)
    ensure_image_data_dark(conn)
    ensure_book_order(conn)
    ensure_text_positions(conn)
    conn.executescript(INDEXES_SQL)
    ensure_schema_version(conn)

def _sketch_columns(conn: sqlite3.Connection) -> set:
    cursor = conn.cursor()
    cursor.execute("PRAGMA table_info(sketch_items)")
    return {row[1] for row in cursor.fetchall()}

def ensure_shared_drawing_id(conn: sqlite3.Connection) -> None:
    """Ensure sketch_items has the shared_drawing_id column for pre-sharing installs."""
    if "shared_drawing_id" not in _sketch_columns(conn):
        conn.execute("ALTER TABLE sketch_items ADD COLUMN shared_drawing_id TEXT")

def ensure_image_data_dark(conn: sqlite3.Connection) -> None:
    """Ensure sketch_items has the dark-mode snapshot column."""
    if "image_data_dark" not in _sketch_columns(conn):
        conn.execute("ALTER TABLE sketch_items ADD COLUMN image_data_dark BLOB")

def ensure_book_order(conn: sqlite3.Connection) -> None:
    """Backfill canonical book_order for rows saved without one."""
    cursor = conn.cursor()
    cursor.execute("SELECT DISTINCT book_name FROM sketch_items WHERE book_order IS NULL OR book_order = 0")
    updates = []
    for row in cursor.fetchall():
        book = find_book(row[0])
        if book is not None:
            updates.append((book.order, row[0]))
    cursor.executemany(
        "UPDATE sketch_items SET book_order = ? WHERE book_name = ? AND (book_order IS NULL OR book_order = 0)",
        updates,
    )

def ensure_text_positions(conn: sqlite3.Connection) -> None:
    """Map legacy text colour values ('black', 'white') onto the default layer position."""
    conn.execute(
        "UPDATE sketch_items SET text_position = 'below' WHERE text_position NOT IN ('below', 'top')"
    )

def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0

def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the SQLite schema version via PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {int(version)}")

def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Ensure the current schema version is written to the database."""
    current = get_schema_version(conn)
    if current != SCHEMA_VERSION:
        set_schema_version(conn, SCHEMA_VERSION)

@contextmanager
def get_conn():
    """Context manager for SQLite connection, using row_factory for dict-like rows."""
    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()

def get_db():
    """FastAPI dependency that yields a DB connection and closes it afterwards."""
    with get_conn() as conn:
        yield conn
