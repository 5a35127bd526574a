from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

import config
from db import database
from db.store import CatalogStore
from models.sketch import SketchRecord
from utils.bible import book_order

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def _write_test_config(config_path: Path) -> None:
    config_path.write_text(
        "\n".join(
            [
                "[logging]",
                "level = \"WARNING\"",
                "",
                "[catalog]",
                "default_text_position = \"below\"",
                "",
                "[preferences]",
            ]
        )
        + "\n",
        encoding="utf-8",
    )


@pytest.fixture
def catalog_dir(tmp_path, monkeypatch):
    config_dir = tmp_path / ".scripturesketch"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    _write_test_config(config_path)

    monkeypatch.delenv("SCRIPTURESKETCH_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SCRIPTURESKETCH_DEFAULT_TEXT_POSITION", raising=False)
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "scripturesketch.db")

    database.init_db()
    return config_dir


@pytest.fixture
def store(catalog_dir):
    with database.get_conn() as conn:
        yield CatalogStore(conn)


@pytest.fixture
def add_sketch(store):
    """Insert and commit a sketch created `minutes` after BASE_TIME."""

    def _add(
        word="Faith",
        minutes=0,
        book="John",
        chapter=3,
        verse=16,
        image=None,
        image_dark=None,
        drawing=None,
        group=None,
    ):
        record = SketchRecord(
            creation_date=BASE_TIME + timedelta(minutes=minutes),
            book_name=book,
            chapter=chapter,
            verse=verse,
            book_order=book_order(book),
            center_word=word,
            drawing_data=drawing,
            image_data=image,
            image_data_dark=image_dark,
            shared_drawing_id=group,
        )
        store.insert(record)
        store.save()
        return record

    return _add
