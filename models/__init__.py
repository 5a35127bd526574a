from .sketch import (
    SketchRecord,
    SketchCreate,
    SketchSummary,
    DrawingUpdate,
    ReferenceLink,
    TextPosition,
    ImageVariant,
)

__all__ = ['SketchRecord', 'SketchCreate', 'SketchSummary', 'DrawingUpdate', 'ReferenceLink', 'TextPosition', 'ImageVariant']
