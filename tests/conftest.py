"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from contacalc.backend.app import create_app  # noqa: E402
from contacalc.backend.app.routes import history  # noqa: E402
from contacalc.backend.app.services.history_service import (  # noqa: E402
    InMemoryHistoryRepository,
)


@pytest.fixture(autouse=True)
def history_repository(monkeypatch: pytest.MonkeyPatch) -> InMemoryHistoryRepository:
    """Give every test an empty in-memory history store."""

    repository = InMemoryHistoryRepository(ttl_seconds=None, max_items=100)
    monkeypatch.setattr(history, "_REPOSITORY", repository)
    return repository


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()
