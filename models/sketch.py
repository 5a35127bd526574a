from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from utils.bible import format_reference


class TextPosition(str, Enum):
    BELOW = "below"
    TOP = "top"


class ImageVariant(str, Enum):
    LIGHT = "light"
    DARK = "dark"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SketchRecord(BaseModel):
    """One word/verse pairing in the catalog.

    Records that share a shared_drawing_id show the same artwork. Only the
    record(s) that own the drawing carry drawing_data and image snapshots;
    linked references leave them empty.
    """

    id: UUID = Field(default_factory=uuid4)
    creation_date: datetime = Field(default_factory=utc_now)
    book_name: str
    chapter: int
    verse: int
    book_order: int = 0
    center_word: str
    text_position: TextPosition = TextPosition.BELOW
    drawing_data: Optional[bytes] = None
    image_data: Optional[bytes] = None
    image_data_dark: Optional[bytes] = None
    shared_drawing_id: Optional[UUID] = None

    @validator("creation_date")
    def ensure_aware(cls, v):
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def reference(self) -> str:
        return format_reference(self.book_name, self.chapter, self.verse)

    @property
    def reference_key(self):
        """Canonical scripture ordering, oldest first within one verse."""
        return (self.book_order, self.chapter, self.verse, self.creation_date)

    def image_for(self, variant: ImageVariant) -> Optional[bytes]:
        if variant == ImageVariant.DARK:
            return self.image_data_dark
        return self.image_data

    class Config:
        from_attributes = True


class SketchCreate(BaseModel):
    """New drawing saved from the editor. Blobs are base64 encoded."""

    center_word: str
    book_name: str
    chapter: int
    verse: int
    text_position: Optional[TextPosition] = None
    drawing_data: str
    image_data: str
    image_data_dark: Optional[str] = None

    @validator("center_word")
    def word_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Center word is required")
        return v.strip()


class DrawingUpdate(BaseModel):
    drawing_data: str
    image_data: str
    image_data_dark: Optional[str] = None


class ReferenceLink(BaseModel):
    """Link another verse to an existing word's artwork."""

    book_name: str
    chapter: int
    verse: int
    text_position: Optional[TextPosition] = None


class SketchSummary(BaseModel):
    id: UUID
    creation_date: datetime
    reference: str
    book_name: str
    chapter: int
    verse: int
    center_word: str
    text_position: TextPosition
    shared_drawing_id: Optional[UUID] = None
    has_drawing: bool
    has_image: bool
    has_image_dark: bool

    @classmethod
    def from_record(cls, record: SketchRecord) -> "SketchSummary":
        return cls(
            id=record.id,
            creation_date=record.creation_date,
            reference=record.reference,
            book_name=record.book_name,
            chapter=record.chapter,
            verse=record.verse,
            center_word=record.center_word,
            text_position=record.text_position,
            shared_drawing_id=record.shared_drawing_id,
            has_drawing=record.drawing_data is not None,
            has_image=record.image_data is not None,
            has_image_dark=record.image_data_dark is not None,
        )
