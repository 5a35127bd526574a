import base64
import binascii
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from db.store import CatalogStore, get_store
from models.sketch import DrawingUpdate, ImageVariant, SketchCreate, SketchRecord, SketchSummary
from utils.bible import InvalidReference
from utils.catalog import filter_records, group_by_verse, group_by_word
from utils.sharing import (
    create_sketch,
    delete_sketch,
    effective_image,
    group_members,
    redraw_sketch,
    resolve_master,
)

router = APIRouter()


def decode_blob(value: Optional[str], field: str) -> Optional[bytes]:
    if value is None:
        return None
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail=f"{field} must be base64 encoded")


def get_sketch_or_404(store: CatalogStore, sketch_id: UUID) -> SketchRecord:
    record = store.get(sketch_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Sketch not found")
    return record


@router.get("/")
async def list_sketches(
    mode: str = Query("scripture", pattern="^(scripture|word)$"),
    q: Optional[str] = Query(None),
    store: CatalogStore = Depends(get_store),
):
    """Catalog overview grouped by verse (scripture mode) or by word."""
    records = filter_records(store.fetch(), q)
    if mode == "word":
        groups = group_by_word(records)
        return {
            "mode": mode,
            "groups": [
                {
                    "word": group["word"],
                    "count": group["count"],
                    "items": [SketchSummary.from_record(r) for r in group["items"]],
                }
                for group in groups
            ],
        }
    groups = group_by_verse(records)
    return {
        "mode": mode,
        "groups": [
            {
                "reference": group["reference"],
                "count": group["count"],
                "items": [SketchSummary.from_record(r) for r in group["items"]],
            }
            for group in groups
        ],
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_new_sketch(payload: SketchCreate, store: CatalogStore = Depends(get_store)):
    """Save a new drawing with its first verse reference."""
    drawing = decode_blob(payload.drawing_data, "drawing_data")
    image = decode_blob(payload.image_data, "image_data")
    image_dark = decode_blob(payload.image_data_dark, "image_data_dark")
    try:
        record = create_sketch(
            store,
            word=payload.center_word,
            book_name=payload.book_name,
            chapter=payload.chapter,
            verse=payload.verse,
            drawing_data=drawing,
            image_data=image,
            image_data_dark=image_dark,
            text_position=payload.text_position,
        )
    except InvalidReference as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return SketchSummary.from_record(record)


@router.get("/{sketch_id}")
async def sketch_detail(sketch_id: UUID, store: CatalogStore = Depends(get_store)):
    record = get_sketch_or_404(store, sketch_id)
    master = resolve_master(group_members(store, record))
    detail = SketchSummary.from_record(record).model_dump()
    detail["master_id"] = master.id if master else None
    detail["is_master"] = master is not None and master.id == record.id
    return detail


@router.get("/{sketch_id}/image")
async def sketch_image(
    sketch_id: UUID,
    variant: ImageVariant = Query(ImageVariant.LIGHT),
    store: CatalogStore = Depends(get_store),
):
    """PNG shown for this sketch, inherited from the group's master when linked."""
    record = get_sketch_or_404(store, sketch_id)
    data = effective_image(store, record, variant)
    if data is None:
        raise HTTPException(status_code=404, detail="No artwork for this sketch")
    return Response(content=data, media_type="image/png")


@router.put("/{sketch_id}/drawing")
async def update_drawing(sketch_id: UUID, payload: DrawingUpdate, store: CatalogStore = Depends(get_store)):
    record = get_sketch_or_404(store, sketch_id)
    record = redraw_sketch(
        store,
        record,
        drawing_data=decode_blob(payload.drawing_data, "drawing_data"),
        image_data=decode_blob(payload.image_data, "image_data"),
        image_data_dark=decode_blob(payload.image_data_dark, "image_data_dark"),
    )
    return SketchSummary.from_record(record)


@router.delete("/{sketch_id}")
async def remove_sketch(
    sketch_id: UUID,
    confirm: bool = Query(False),
    store: CatalogStore = Depends(get_store),
):
    """Delete a sketch, moving its artwork to a sibling when it holds the only copy.

    Deleting the last record of a group loses the artwork for good, so it is
    refused with 409 until the client repeats the call with confirm=true.
    """
    record = get_sketch_or_404(store, sketch_id)
    plan = delete_sketch(store, record, confirmed=confirm)
    if plan.requires_confirmation and not confirm:
        raise HTTPException(
            status_code=409,
            detail="This is the last reference to this artwork. Resend with confirm=true to delete it.",
        )
    return {
        "deleted": str(record.id),
        "artwork_moved_to": str(plan.transfer_to.id) if plan.transfer_to else None,
    }
