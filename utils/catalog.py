from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from models.sketch import SketchRecord
from utils.bible import format_reference

UNKNOWN_WORD = "Unknown"


def filter_records(records: Iterable[SketchRecord], search_text: Optional[str]) -> List[SketchRecord]:
    """Match search text against the word, the book or a "chapter:verse" string."""
    records = list(records)
    if search_text is None or not search_text.strip():
        return records
    needle = search_text.strip()
    lowered = needle.lower()
    matches = []
    for record in records:
        word_match = lowered in (record.center_word or "").lower()
        book_match = lowered in (record.book_name or "").lower()
        verse_match = needle in f"{record.chapter}:{record.verse}"
        if word_match or book_match or verse_match:
            matches.append(record)
    return matches


def sort_by_reference(records: Iterable[SketchRecord]) -> List[SketchRecord]:
    return sorted(records, key=lambda record: record.reference_key)


def group_by_verse(records: Iterable[SketchRecord]) -> List[Dict[str, Any]]:
    """Scripture mode: one entry per verse, in canonical order."""
    grouped: Dict[Tuple[int, str, int, int], List[SketchRecord]] = {}
    for record in records:
        key = (record.book_order, record.book_name, record.chapter, record.verse)
        grouped.setdefault(key, []).append(record)
    entries = []
    for key in sorted(grouped, key=lambda k: (k[0], k[2], k[3], k[1])):
        _, book_name, chapter, verse = key
        items = sorted(grouped[key], key=lambda record: record.creation_date)
        entries.append(
            {
                "reference": format_reference(book_name, chapter, verse),
                "book_name": book_name,
                "chapter": chapter,
                "verse": verse,
                "count": len(items),
                "items": items,
            }
        )
    return entries


def group_by_word(records: Iterable[SketchRecord]) -> List[Dict[str, Any]]:
    """Word mode: one entry per case-insensitive word, alphabetical."""
    grouped: Dict[str, List[SketchRecord]] = {}
    for record in records:
        word = record.center_word or UNKNOWN_WORD
        grouped.setdefault(word.lower(), []).append(record)
    entries = []
    for key in sorted(grouped):
        items = sort_by_reference(grouped[key])
        oldest = min(items, key=lambda record: record.creation_date)
        entries.append(
            {
                "word": oldest.center_word or UNKNOWN_WORD,
                "count": len(items),
                "items": items,
            }
        )
    return entries
