"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Dict, List

from PIL import Image

from showmatch.database import CatalogShow, init_database, get_session
from showmatch.logger import get_logger, reset_logger

OPTIMIZED_PREFIX = "/images/tv-shows/"


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir, console off."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def sample_shows() -> List[Dict]:
    """Catalog rows in the shape the seeding script and tests use."""
    return [
        {"id": 1, "name": "Bluey", "image_url": "https://example.com/bluey.png"},
        {"id": 2, "name": "Peppa Pig", "image_url": None},
        {
            "id": 3,
            "name": "The Magic School Bus Rides Again",
            "image_url": "/images/tv-shows/the-magic-school-bus-rides-again.jpg",
        },
        {"id": 4, "name": "Paw Patrol", "image_url": "https://cdn.example.com/paw.jpg", "stimulation_score": 4},
    ]


@pytest.fixture
def catalog_db(tmp_path, sample_shows) -> Path:
    """SQLite catalog populated with sample_shows."""
    db_path = tmp_path / "catalog.db"
    init_database(db_path)
    session = get_session(db_path)
    for row in sample_shows:
        session.add(CatalogShow(**row))
    session.commit()
    session.close()
    return db_path


@pytest.fixture
def db_session(catalog_db):
    session = get_session(catalog_db)
    yield session
    session.close()


def make_image(path: Path, size=(800, 600), color=(30, 120, 200)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path


@pytest.fixture
def image_factory():
    """Write a solid-colour image and return its path."""
    return make_image


@pytest.fixture
def source_images(tmp_path) -> Path:
    """Directory of source artwork plus a non-image file."""
    source = tmp_path / "shows"
    make_image(source / "bluey.jpg")
    make_image(source / "peppa-pig.png", size=(300, 300))
    make_image(source / "magic-school-bus.webp")
    (source / "notes.txt").write_text("not an image")
    return source


@pytest.fixture
def shows_json(tmp_path, sample_shows) -> Path:
    path = tmp_path / "shows.json"
    path.write_text(json.dumps({"shows": sample_shows}, indent=2))
    return path
