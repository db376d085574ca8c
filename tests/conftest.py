"""
Pytest configuration for the Rx Writer test suite.

Every test gets its own in-memory SQLite store, so tests never touch the
real database file and never see each other's records.
"""
import os
from types import SimpleNamespace

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core import database  # noqa: E402
import models  # noqa: E402,F401


@pytest.fixture
def session_factory(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database.Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    # Functions called without an explicit session open one from here
    monkeypatch.setattr(database, "SessionLocal", factory)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def patient_data():
    return {
        "name": "Asha Verma",
        "age": 34,
        "gender": "Female",
        "phone": "9876543210",
        "email": "asha@example.com",
        "weight": 62.5,
        "height": 160.0,
        "blood_group": "B+",
        "allergies": ["Penicillin", "Sulfa"],
        "chronic_conditions": ["Asthma"],
        "emergency_contact": "Ravi Verma 9812345678",
        "address": "12 MG Road, Pune",
    }


class FakeCompletions:
    """Stands in for client.chat.completions; records each request."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_client():
    """Build a fake chat-completions client: fake_client(reply=..., error=...)."""

    def _make(reply="", error=None):
        completions = FakeCompletions(reply=reply, error=error)
        return SimpleNamespace(chat=SimpleNamespace(completions=completions))

    return _make
