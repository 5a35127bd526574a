# Routes package __init__.py - re-exports routers for main.py convenience
from .sketches import router as sketches_router
from .words import router as words_router
from .bible import router as bible_router

__all__ = ['sketches_router', 'words_router', 'bible_router']
