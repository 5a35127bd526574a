"""Shared artwork: one master drawing, many linked verse references.

The master is never stored; it is derived from the group on every read
(oldest record that has image data), so adding or removing references can't
leave a stale pointer behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from config import get_config_value
from db.predicates import Equals, IsNotNull, IsNull
from db.store import CatalogStore, StorageFailure
from models.sketch import ImageVariant, SketchRecord, TextPosition, utc_now
from utils.bible import validate_reference

logger = logging.getLogger(__name__)

_VARIANT_FIELDS = {
    ImageVariant.LIGHT: "image_data",
    ImageVariant.DARK: "image_data_dark",
}


def _age_key(record: SketchRecord):
    return (record.creation_date, str(record.id))


def resolve_master(group_records: Iterable[SketchRecord]) -> Optional[SketchRecord]:
    """Oldest record with image data, falling back to the oldest record overall."""
    ordered = sorted(group_records, key=_age_key)
    if not ordered:
        return None
    for record in ordered:
        if record.image_data is not None:
            return record
    return ordered[0]


def effective_image(
    store: CatalogStore,
    record: SketchRecord,
    variant: ImageVariant = ImageVariant.LIGHT,
) -> Optional[bytes]:
    """The record's own snapshot, or the one held by another member of its group.

    If several members hold the variant the oldest wins. Records not yet
    through the word-group migration look among unmigrated records with the
    same center word.
    """
    own = record.image_for(variant)
    if own is not None:
        return own
    if record.shared_drawing_id is not None:
        group = Equals("shared_drawing_id", record.shared_drawing_id)
    else:
        group = Equals("center_word", record.center_word, case_insensitive=True) & IsNull(
            "shared_drawing_id"
        )
    holders = store.fetch(group & IsNotNull(_VARIANT_FIELDS[variant]))
    if not holders:
        return None
    return holders[0].image_for(variant)


def group_members(store: CatalogStore, record: SketchRecord) -> List[SketchRecord]:
    """Every record showing the same artwork as record (record included).

    Records that have not been through the word-group migration are grouped by
    case-insensitive center word instead.
    """
    if record.shared_drawing_id is not None:
        return store.fetch(Equals("shared_drawing_id", record.shared_drawing_id))
    return store.fetch(Equals("center_word", record.center_word, case_insensitive=True))


def default_text_position() -> TextPosition:
    return TextPosition(get_config_value("catalog", "default_text_position", "below"))


def create_sketch(
    store: CatalogStore,
    word: str,
    book_name: str,
    chapter: int,
    verse: int,
    drawing_data: bytes,
    image_data: bytes,
    image_data_dark: Optional[bytes] = None,
    text_position: Optional[TextPosition] = None,
) -> SketchRecord:
    """Save a freshly drawn icon as the first member of a new group."""
    book = validate_reference(book_name, chapter, verse)
    record = SketchRecord(
        book_name=book.name,
        chapter=chapter,
        verse=verse,
        book_order=book.order,
        center_word=word,
        text_position=text_position or default_text_position(),
        drawing_data=drawing_data,
        image_data=image_data,
        image_data_dark=image_data_dark,
        shared_drawing_id=uuid4(),
    )
    store.insert(record)
    store.save()
    logger.info("Created sketch %s for %r at %s", record.id, word, record.reference)
    return record


def redraw_sketch(
    store: CatalogStore,
    record: SketchRecord,
    drawing_data: bytes,
    image_data: bytes,
    image_data_dark: Optional[bytes] = None,
) -> SketchRecord:
    """Replace the artwork on an existing record, keeping its identity and group."""
    record.drawing_data = drawing_data
    record.image_data = image_data
    record.image_data_dark = image_data_dark
    store.update(record)
    store.save()
    return record


def link_reference(
    store: CatalogStore,
    word: str,
    shared_drawing_id: Optional[UUID],
    book_name: str,
    chapter: int,
    verse: int,
    text_position: Optional[TextPosition] = None,
) -> SketchRecord:
    """Attach another verse to a word's existing artwork.

    The new record owns no drawing or snapshots; it shows the master's.
    """
    book = validate_reference(book_name, chapter, verse)
    record = SketchRecord(
        creation_date=utc_now(),
        book_name=book.name,
        chapter=chapter,
        verse=verse,
        book_order=book.order,
        center_word=word,
        text_position=text_position or default_text_position(),
        drawing_data=None,
        image_data=None,
        image_data_dark=None,
        shared_drawing_id=shared_drawing_id,
    )
    store.insert(record)
    store.save()
    logger.info("Linked %s to %r (group %s)", record.reference, word, shared_drawing_id)
    return record


@dataclass
class DeletionPlan:
    target: SketchRecord
    requires_confirmation: bool = False
    transfer_to: Optional[SketchRecord] = None


def handle_deletion(target: SketchRecord, group_records: Iterable[SketchRecord]) -> DeletionPlan:
    """Decide how to delete target without losing its group's artwork."""
    siblings = [record for record in group_records if record.id != target.id]
    if not siblings:
        return DeletionPlan(target=target, requires_confirmation=True)
    holds_only_copy = target.image_data is not None and all(
        record.image_data is None for record in siblings
    )
    if holds_only_copy:
        newest = max(siblings, key=_age_key)
        return DeletionPlan(target=target, transfer_to=newest)
    return DeletionPlan(target=target)


def apply_deletion(store: CatalogStore, plan: DeletionPlan, confirmed: bool = False) -> bool:
    """Carry out a deletion plan.

    Returns False, changing nothing, when the plan needs confirmation that
    was not given. Transfer and delete are committed together.
    """
    if plan.requires_confirmation and not confirmed:
        return False
    target = plan.target
    try:
        if plan.transfer_to is not None:
            artwork = {"drawing_data": target.drawing_data, "image_data": target.image_data}
            if target.image_data_dark is not None:
                artwork["image_data_dark"] = target.image_data_dark
            store.update(plan.transfer_to.model_copy(update=artwork))
        store.delete(target)
        store.save()
    except StorageFailure:
        store.rollback()
        raise
    if plan.transfer_to is not None:
        logger.info("Moved artwork from %s to %s before deleting", target.id, plan.transfer_to.id)
    logger.info("Deleted sketch %s (%s)", target.id, target.reference)
    return True


def delete_sketch(store: CatalogStore, target: SketchRecord, confirmed: bool = False) -> DeletionPlan:
    """Plan and apply a deletion for target against its current group."""
    plan = handle_deletion(target, group_members(store, target))
    apply_deletion(store, plan, confirmed=confirmed)
    return plan
