import argparse
import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db import database
from db.store import CatalogStore, StorageFailure
from config import load_config, PreferenceFlags
from routes import sketches, words, bible  # Import routers
from utils.migration import run_word_group_migration

logger = logging.getLogger("scripturesketch")


def configure_logging(config: dict) -> None:
    level = getattr(logging, config["logging"]["level"], logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def prepare_catalog() -> int:
    """Create/upgrade the database and run pending one-time migrations."""
    database.init_db()
    with database.get_conn() as conn:
        return run_word_group_migration(CatalogStore(conn), PreferenceFlags())


# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: config, DB and word-group migration before any request is served
    configure_logging(load_config())
    try:
        migrated = prepare_catalog()
        if migrated:
            logger.info("Grouped %d legacy sketches", migrated)
    except StorageFailure:
        logger.error("Catalog migration did not complete; grouping falls back to word matching")
    yield


app = FastAPI(title="ScriptureSketch", description="Hand-drawn keyword icons linked to scripture references")
app.router.lifespan_context = lifespan

# Include routers
app.include_router(sketches.router, prefix="/sketches", tags=["sketches"])
app.include_router(words.router, prefix="/words", tags=["words"])
app.include_router(bible.router, prefix="/bible", tags=["bible"])


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure):
    return JSONResponse(
        status_code=500,
        content={"detail": f"The catalog could not be saved or read: {exc}. Please try again."},
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="ScriptureSketch catalog service")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config, then run migrations")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    if args.init:
        configure_logging(load_config())
        migrated = prepare_catalog()
        print(f"DB initialized at {database.DB_PATH} ({migrated} legacy sketches grouped)")
        exit(0)
    # Run server
    port = 8000
    reload = args.dev
    uvicorn.run("main:app", host="127.0.0.1", port=port, reload=reload, log_level="info")
