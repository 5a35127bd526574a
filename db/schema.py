# SQL schema for the ScriptureSketch catalog

SCHEMA_VERSION = 2

SCHEMA_SQL = """
-- Sketches: one row per (word, verse) pairing. Rows sharing a
-- shared_drawing_id show the same artwork.
CREATE TABLE IF NOT EXISTS sketch_items (
    id TEXT PRIMARY KEY,
    creation_date TEXT NOT NULL,
    book_name TEXT NOT NULL,
    chapter INTEGER NOT NULL CHECK(chapter >= 1),
    verse INTEGER NOT NULL CHECK(verse >= 1),
    book_order INTEGER NOT NULL DEFAULT 0,
    center_word TEXT NOT NULL,
    text_position TEXT NOT NULL DEFAULT 'below' CHECK(text_position IN ('below', 'top')),
    drawing_data BLOB,
    image_data BLOB,
    image_data_dark BLOB,
    shared_drawing_id TEXT
);
"""

# Column order used by the store for SELECT/INSERT
SKETCH_COLUMNS = (
    "id",
    "creation_date",
    "book_name",
    "chapter",
    "verse",
    "book_order",
    "center_word",
    "text_position",
    "drawing_data",
    "image_data",
    "image_data_dark",
    "shared_drawing_id",
)

# Indexes for performance
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_sketch_items_shared ON sketch_items (shared_drawing_id);
CREATE INDEX IF NOT EXISTS idx_sketch_items_word ON sketch_items (center_word COLLATE NOCASE);
CREATE INDEX IF NOT EXISTS idx_sketch_items_reference ON sketch_items (book_order, chapter, verse);
CREATE INDEX IF NOT EXISTS idx_sketch_items_created ON sketch_items (creation_date);
"""
