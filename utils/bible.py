from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

# Psalm 119
MAX_VERSE = 176


class InvalidReference(ValueError):
    """Raised when a book/chapter/verse does not exist in the canonical table."""


@dataclass(frozen=True)
class BibleBook:
    order: int
    name: str
    chapter_count: int


_BOOK_TABLE = [
    # Old Testament
    ("Genesis", 50),
    ("Exodus", 40),
    ("Leviticus", 27),
    ("Numbers", 36),
    ("Deuteronomy", 34),
    ("Joshua", 24),
    ("Judges", 21),
    ("Ruth", 4),
    ("1 Samuel", 31),
    ("2 Samuel", 24),
    ("1 Kings", 22),
    ("2 Kings", 25),
    ("1 Chronicles", 29),
    ("2 Chronicles", 36),
    ("Ezra", 10),
    ("Nehemiah", 13),
    ("Esther", 10),
    ("Job", 42),
    ("Psalms", 150),
    ("Proverbs", 31),
    ("Ecclesiastes", 12),
    ("Song of Solomon", 8),
    ("Isaiah", 66),
    ("Jeremiah", 52),
    ("Lamentations", 5),
    ("Ezekiel", 48),
    ("Daniel", 12),
    ("Hosea", 14),
    ("Joel", 3),
    ("Amos", 9),
    ("Obadiah", 1),
    ("Jonah", 4),
    ("Micah", 7),
    ("Nahum", 3),
    ("Habakkuk", 3),
    ("Zephaniah", 3),
    ("Haggai", 2),
    ("Zechariah", 14),
    ("Malachi", 4),
    # New Testament
    ("Matthew", 28),
    ("Mark", 16),
    ("Luke", 24),
    ("John", 21),
    ("Acts", 28),
    ("Romans", 16),
    ("1 Corinthians", 16),
    ("2 Corinthians", 13),
    ("Galatians", 6),
    ("Ephesians", 6),
    ("Philippians", 4),
    ("Colossians", 4),
    ("1 Thessalonians", 5),
    ("2 Thessalonians", 3),
    ("1 Timothy", 6),
    ("2 Timothy", 4),
    ("Titus", 3),
    ("Philemon", 1),
    ("Hebrews", 13),
    ("James", 5),
    ("1 Peter", 5),
    ("2 Peter", 3),
    ("1 John", 5),
    ("2 John", 1),
    ("3 John", 1),
    ("Jude", 1),
    ("Revelation", 22),
]

BOOKS: List[BibleBook] = [
    BibleBook(order=index, name=name, chapter_count=chapters)
    for index, (name, chapters) in enumerate(_BOOK_TABLE, start=1)
]
_BOOKS_BY_NAME: Dict[str, BibleBook] = {book.name: book for book in BOOKS}


def find_book(name: Optional[str]) -> Optional[BibleBook]:
    """Return the canonical book with this exact name, or None."""
    if not name:
        return None
    return _BOOKS_BY_NAME.get(name)


def book_order(name: Optional[str]) -> int:
    """Canonical 1-66 position of a book, 0 when the name is unknown."""
    book = find_book(name)
    return book.order if book else 0


def validate_reference(book_name: str, chapter: int, verse: int) -> BibleBook:
    """Check a reference against the canonical table.

    Returns:
        The matching BibleBook.

    Raises:
        InvalidReference if the book is unknown or chapter/verse are out of range.
    """
    book = find_book(book_name)
    if book is None:
        raise InvalidReference(f"Unknown book: {book_name!r}")
    if not 1 <= chapter <= book.chapter_count:
        raise InvalidReference(
            f"{book.name} has chapters 1-{book.chapter_count}, got {chapter}"
        )
    if not 1 <= verse <= MAX_VERSE:
        raise InvalidReference(f"Verse must be between 1 and {MAX_VERSE}, got {verse}")
    return book


def format_reference(book_name: str, chapter: int, verse: int) -> str:
    return f"{book_name} {chapter}:{verse}"
