"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for the show catalog.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class CatalogShow(Base):
    """Catalog TV show model."""

    __tablename__ = "catalog_tv_shows"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    stimulation_score = Column(Integer, nullable=True)  # 1-5
    age_range = Column(String, nullable=True)
    release_year = Column(Integer, nullable=True)
    episode_length = Column(Integer, nullable=True)  # minutes
    seasons = Column(Integer, nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def __repr__(self) -> str:
        return f"<CatalogShow id={self.id} name={self.name!r}>"


# Columns that import tooling may overwrite
UPDATABLE_FIELDS = (
    "image_url",
    "stimulation_score",
    "age_range",
    "release_year",
    "episode_length",
    "seasons",
    "is_featured",
)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
