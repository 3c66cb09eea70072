"""Shared fixtures: an in-memory SQLite database per test."""

import pytest
from fastapi.testclient import TestClient

from string_analyzer.config import Settings
from string_analyzer.database import Database
from string_analyzer.main import create_app
from string_analyzer.services.records import RecordService


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.init()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def service(session):
    return RecordService(session)


@pytest.fixture
def client():
    app = create_app(Settings(database_url="sqlite://"))
    with TestClient(app) as test_client:
        yield test_client
