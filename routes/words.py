from fastapi import APIRouter, Depends, HTTPException, status

from db.predicates import Equals
from db.store import CatalogStore, get_store
from models.sketch import ReferenceLink, SketchSummary
from utils.bible import InvalidReference
from utils.catalog import sort_by_reference
from utils.sharing import link_reference, resolve_master

router = APIRouter()


@router.get("/{word}")
async def word_detail(word: str, store: CatalogStore = Depends(get_store)):
    """The word's artwork owner plus every verse linked to it, in canonical order."""
    records = store.fetch(Equals("center_word", word, case_insensitive=True))
    if not records:
        raise HTTPException(status_code=404, detail="Word not found")
    master = resolve_master(records)
    return {
        "word": master.center_word,
        "master_id": master.id,
        "shared_drawing_id": master.shared_drawing_id,
        "has_artwork": master.image_data is not None,
        "references": [SketchSummary.from_record(r) for r in sort_by_reference(records)],
    }


@router.post("/{word}/references", status_code=status.HTTP_201_CREATED)
async def add_reference(word: str, payload: ReferenceLink, store: CatalogStore = Depends(get_store)):
    """Link another verse to this word's drawing."""
    records = store.fetch(Equals("center_word", word, case_insensitive=True))
    if not records:
        raise HTTPException(status_code=404, detail="Word not found")
    master = resolve_master(records)
    try:
        record = link_reference(
            store,
            word=master.center_word,
            shared_drawing_id=master.shared_drawing_id,
            book_name=payload.book_name,
            chapter=payload.chapter,
            verse=payload.verse,
            text_position=payload.text_position,
        )
    except InvalidReference as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return SketchSummary.from_record(record)
