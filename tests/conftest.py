"""Pytest configuration and fixtures."""
import pytest
import os
import tempfile
from fastapi.testclient import TestClient
from chatlog.config import settings
from chatlog.models import init_db


@pytest.fixture(autouse=True)
def test_db(monkeypatch):
    """Create a temporary test database for each test."""
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db_url = f"sqlite:///{db_path}"
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setattr(settings, "database_url", db_url)

    init_db()

    yield db_path

    for path in (db_path, db_path + "-wal", db_path + "-shm"):
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


@pytest.fixture
def client():
    from chatlog.main import app
    return TestClient(app)
