from fastapi import APIRouter, HTTPException

from utils.bible import BOOKS, MAX_VERSE, find_book

router = APIRouter()


@router.get("/books")
async def list_books():
    """Canonical book table used by the reference pickers."""
    return {
        "max_verse": MAX_VERSE,
        "books": [
            {"order": book.order, "name": book.name, "chapter_count": book.chapter_count}
            for book in BOOKS
        ],
    }


@router.get("/books/{name}")
async def book_detail(name: str):
    book = find_book(name)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return {
        "order": book.order,
        "name": book.name,
        "chapters": list(range(1, book.chapter_count + 1)),
    }
