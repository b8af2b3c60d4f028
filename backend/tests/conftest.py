"""Shared test fixtures for the Grimoire backend test suite.

All tests use an in-memory SQLite database shared through a StaticPool
connection. Tables are dropped and recreated, and the root folder seeded,
before every test for complete isolation.

Service tests run against both repository backends: the ``backend``
fixture is parametrised over the SQLAlchemy repositories and the
in-memory doubles, so every scenario is checked on each.
"""

import os

# Use an in-memory database and readable logs before any app imports.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "development"

from typing import NamedTuple

import pytest
from fastapi.testclient import TestClient

from grimoire.database import Base, engine, get_db, SessionLocal
from grimoire.main import app
from grimoire.core.seeder import seed_root_folder
from grimoire.middleware.request_context import rate_limiter
from grimoire.repositories import (
    CharacterRepository,
    FolderRepository,
    InMemoryStore,
    SpellRepository,
)
from grimoire.schemas.character import CharacterCreate
from grimoire.schemas.spell import SpellCreate
from grimoire.services import CharacterService, FolderService, SpellService


@pytest.fixture(autouse=True)
def _fresh_schema():
    """Recreate every table and seed the root folder before each test.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_root_folder(session)
    finally:
        session.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    rate_limiter.reset()  # Reset rate limiter so tests don't hit 429
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Service fixtures over both repository backends
# ---------------------------------------------------------------------------

class Repos(NamedTuple):
    folders: object
    spells: object
    characters: object


@pytest.fixture(params=["sql", "memory"])
def backend(request, db) -> Repos:
    if request.param == "sql":
        return Repos(FolderRepository(db), SpellRepository(db), CharacterRepository(db))
    return Repos(*InMemoryStore().repositories())


@pytest.fixture()
def folder_service(backend) -> FolderService:
    return FolderService(backend.folders, backend.spells)


@pytest.fixture()
def spell_service(backend) -> SpellService:
    return SpellService(backend.spells, backend.folders)


@pytest.fixture()
def character_service(backend) -> CharacterService:
    return CharacterService(backend.characters, backend.spells)


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

def make_spell(
    name: str = "Fire Bolt",
    convocation: str = "Peleahn",
    folder_id: int = 1,
    **overrides,
) -> dict:
    """Factory for spell creation payloads."""
    payload = {
        "name": name,
        "convocation": convocation,
        "complexity_level": 3,
        "description": f"{name}: a test spell.",
        "casting_time": "1 round",
        "range": "30 feet",
        "duration": "Instant",
        "folder_id": folder_id,
    }
    payload.update(overrides)
    return payload


def make_character(
    name: str = "Aldric",
    convocations=("Lyahvi",),
    rank: str = "Mavari",
    **overrides,
) -> dict:
    """Factory for character creation payloads."""
    payload = {
        "name": name,
        "convocations": list(convocations),
        "rank": rank,
        "game": "Harn",
    }
    payload.update(overrides)
    return payload


def create_spell(spell_service: SpellService, **kwargs):
    return spell_service.create_spell(SpellCreate(**make_spell(**kwargs)))


def create_character(character_service: CharacterService, **kwargs):
    return character_service.create_character(CharacterCreate(**make_character(**kwargs)))
