"""One-time backfill of shared_drawing_id onto sketches saved before artwork sharing.

Records are grouped by lower-cased center word and each group gets one new
id. Artwork is left where it is: the master is chosen at read time by
utils.sharing.resolve_master, so migration never clears drawing or image
data.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Protocol
from uuid import uuid4

from db.predicates import IsNull
from db.store import CatalogStore, StorageFailure
from models.sketch import SketchRecord

logger = logging.getLogger(__name__)

MIGRATION_KEY = "has_performed_word_group_migration_v1"
UNKNOWN_GROUP = "unknown"


class FlagStore(Protocol):
    def get_bool(self, key: str, default: bool = False) -> bool: ...

    def set_bool(self, key: str, value: bool) -> None: ...


def word_group_key(word) -> str:
    if not word:
        return UNKNOWN_GROUP
    return word.lower()


def group_legacy_records(records: List[SketchRecord]) -> Dict[str, List[SketchRecord]]:
    groups: Dict[str, List[SketchRecord]] = {}
    for record in records:
        groups.setdefault(word_group_key(record.center_word), []).append(record)
    return groups


def run_word_group_migration(store: CatalogStore, flags: FlagStore, key: str = MIGRATION_KEY) -> int:
    """Assign group ids to ungrouped sketches, once.

    Returns the number of records updated. On StorageFailure nothing is
    committed and the completion flag stays unset, so the next startup
    retries; already-grouped records are never touched.
    """
    if flags.get_bool(key):
        return 0

    legacy = store.fetch(IsNull("shared_drawing_id"))
    if not legacy:
        flags.set_bool(key, True)
        return 0

    groups = group_legacy_records(legacy)
    try:
        for word, members in groups.items():
            shared_id = uuid4()
            for record in sorted(members, key=lambda r: r.creation_date):
                record.shared_drawing_id = shared_id
                store.update(record)
            logger.debug("Word group %r -> %s (%d records)", word, shared_id, len(members))
        store.save()
    except StorageFailure:
        store.rollback()
        logger.exception("Word group migration failed; will retry on next start")
        raise

    flags.set_bool(key, True)
    logger.info("Word group migration assigned %d groups to %d records", len(groups), len(legacy))
    return len(legacy)
