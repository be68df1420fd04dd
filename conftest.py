"""Shared pytest fixtures: session builders and an in-memory database."""

import os

# Must be set before database.py is imported anywhere
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from datetime import datetime, timedelta

import pytest

from session_classifier import SessionRecord, SetEntry


def _session(when, hint="upper", duration=None, exercises=None) -> SessionRecord:
    if isinstance(when, str):
        when = datetime.fromisoformat(when)
    return SessionRecord(
        date=when,
        category_hint=hint,
        duration_seconds=duration,
        exercises={
            name: tuple(SetEntry(weight=w, reps=r) for w, r in sets)
            for name, sets in (exercises or {}).items()
        },
    )


@pytest.fixture
def make_session():
    """make_session("2024-03-04T10:00", "upper", 3600, {"Bench": [(100, 5)]})"""
    return _session


@pytest.fixture
def daily_sessions():
    """n consecutive daily sessions at 10:00 starting `start`."""
    def build(n, start="2024-01-01T10:00", hint="upper", duration=None):
        first = datetime.fromisoformat(start)
        return [_session(first + timedelta(days=i), hint, duration) for i in range(n)]
    return build


@pytest.fixture
def db():
    from database import Base, SessionLocal, engine

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
