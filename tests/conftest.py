"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.models import Base, Household, Member
from app.schemas import HouseholdMemberRef


@pytest.fixture
def reference_local() -> datetime:
    """Monday 2024-01-01 10:00 on the caller's wall clock."""
    return datetime(2024, 1, 1, 10, 0)


@pytest.fixture
def pst_now() -> datetime:
    """The UTC instant matching ``reference_local`` for a PST caller (offset 480)."""
    return datetime(2024, 1, 1, 18, 0, tzinfo=UTC)


@pytest.fixture
def offline_settings() -> Settings:
    """Settings with no model configured, so only the rule-based path runs."""
    return Settings(_env_file=None, OPENAI_API_KEY=None)


@pytest.fixture
def roster() -> list[HouseholdMemberRef]:
    return [
        HouseholdMemberRef(id="u1", name="Jordan"),
        HouseholdMemberRef(id="u2", name="Ellie"),
    ]


@pytest.fixture
def session_factory():
    """In-memory SQLite shared by every session the test opens."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def household(db) -> SimpleNamespace:
    """A household with an owner, a read-only child and a second household's adult."""
    home = Household(name="Rivera Household")
    other = Household(name="Neighbours")
    db.add_all([home, other])
    db.flush()

    jordan = Member(
        household_id=home.id, name="Jordan", email="jordan@example.com", role="owner",
        created_at=datetime(2023, 12, 1, 9, 0),
    )
    ellie = Member(
        household_id=home.id, name="Ellie", role="child-view",
        created_at=datetime(2023, 12, 1, 9, 5),
    )
    stranger = Member(household_id=other.id, name="Sam", role="adult")
    db.add_all([jordan, ellie, stranger])
    db.commit()
    return SimpleNamespace(home=home, other=other, jordan=jordan, ellie=ellie, stranger=stranger)
