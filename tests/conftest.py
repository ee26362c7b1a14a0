"""Shared test fixtures."""
import os
from datetime import date
from typing import Generator

# Keep get_engine() (used by create_app) off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from moviesync.models.catalog import Actor, Director, Experiment, Movie  # noqa: F401
from moviesync.models.sync import SyncLog  # noqa: F401
from moviesync.sync.store import RecordStore


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(engine) -> RecordStore:
    return RecordStore(engine)


@pytest.fixture(name="seeded_movie")
def seeded_movie_fixture(test_session: Session) -> Movie:
    """A persisted, never-synced Movie."""
    movie = Movie(
        title="Samurai Cop",
        slug="samurai-cop",
        year="1991",
        release_date=date(1991, 1, 1),
        runtime=96,
        overview="A cop with samurai training takes on the Katana gang.",
        imdb_id="tt0130236",
        actors=["Matt Hannon", "Robert Z'Dar"],
        directors=["Amir Shervan"],
    )
    test_session.add(movie)
    test_session.commit()
    test_session.refresh(movie)
    return movie
