"""Test configuration."""
import os
from datetime import UTC, datetime
from typing import Generator

import pytest

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# Import after environment setup
from sqlalchemy.orm import Session  # noqa: E402

from wordcoach.models.base import Base, SessionLocal, engine, init_db  # noqa: E402
from wordcoach.models.models import Word  # noqa: E402
from wordcoach.services.sql_stores import seed_reference_data  # noqa: E402

REVIEW_TIME = datetime(2024, 1, 10, 9, 30, tzinfo=UTC)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database for each test."""
    init_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded_db(db: Session) -> Session:
    """Database with the default strategies and learning modes."""
    seed_reference_data(db)
    return db


@pytest.fixture
def words(seeded_db: Session) -> list[Word]:
    """A small word catalogue: w1..w5."""
    catalogue = [
        ("w1", "apple", "苹果"),
        ("w2", "river", "河"),
        ("w3", "window", "窗户"),
        ("w4", "bridge", "桥"),
        ("w5", "mountain", "山"),
    ]
    rows = []
    for word_id, spelling, translation in catalogue:
        row = Word(id=word_id, spelling=spelling, translation=translation)
        seeded_db.add(row)
        seeded_db.commit()
        rows.append(row)
    return rows


@pytest.fixture
def review_time() -> datetime:
    return REVIEW_TIME
