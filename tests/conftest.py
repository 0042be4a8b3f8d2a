"""
tests/conftest.py -- Shared test fixtures for Flashcards API integration tests.

This module provides:
  - RecordingMailer: mailer double that keeps every token it was asked to send
  - _make_test_stores(): creates isolated in-memory DBs for users + study data
  - _patch_lifespan(): wires test stores and services into app.state
  - api_client: (client, mailer) TestClient bound to one module's databases
  - make_user: registers (and by default verifies + logs in) a fresh account

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

DEBUG and RATE_LIMIT_ENABLED must be set before any project import:
get_settings() is cached on first call and api.limiter reads it at import.
"""

from __future__ import annotations

import itertools
import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: set before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthService
from auth.store import UserStore
from core.config import get_settings
from study.service import StudyService
from study.store import StudyStore

PASSWORD = "Password123"

_email_counter = itertools.count(1)


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}{next(_email_counter)}@example.com"


# ---------------------------------------------------------------------------
# Mailer double
# ---------------------------------------------------------------------------


class RecordingMailer:
    """Stands in for notify.mailer.Mailer; records instead of sending.

    Set fail=True to make every send raise, which exercises the
    best-effort delivery path in AuthService.
    """

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def send_verification_email(self, email: str, token: str) -> None:
        self._record("verify", email, token)

    def send_password_reset_email(self, email: str, token: str) -> None:
        self._record("reset", email, token)

    def _record(self, kind: str, email: str, token: str) -> None:
        if self.fail:
            raise RuntimeError("SMTP down")
        self.sent.append((kind, email, token))

    def last_token(self, kind: str, email: str) -> str:
        for sent_kind, sent_email, token in reversed(self.sent):
            if sent_kind == kind and sent_email == email:
                return token
        raise AssertionError(f"no {kind} email sent to {email}")

    def count(self, kind: str, email: str) -> int:
        return sum(1 for k, e, _ in self.sent if k == kind and e == email)


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, StudyStore]:
    """Create isolated named shared-memory SQLite stores for one test module.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_flashcards_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=url), StudyStore(db_url=url)


def _patch_lifespan(user_store: UserStore, study_store: StudyStore, mailer: RecordingMailer):
    """Return an async context manager that replaces the real lifespan.

    Routes see the test stores and the recording mailer instead of the
    production database and SMTP.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.study_store = study_store
        app.state.auth_service = AuthService(user_store, mailer, get_settings())
        app.state.study_service = StudyService(study_store)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, RecordingMailer], None, None]:
    """Yield (client, mailer) for API integration tests.

    One TestClient per test module; every test registers its own users with
    unique_email() so tests within a module stay independent.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    user_store, study_store = _make_test_stores(suffix)
    mailer = RecordingMailer()

    app.router.lifespan_context = _patch_lifespan(user_store, study_store, mailer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, mailer

    study_store.close()
    user_store.close()


@dataclass
class TestUser:
    __test__ = False

    id: int
    email: str
    token: str | None

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def make_user(api_client) -> Callable[..., TestUser]:
    """Factory: register a new account, optionally verify it and log in."""
    client, mailer = api_client

    def _make(email: str | None = None, password: str = PASSWORD, verified: bool = True) -> TestUser:
        email = email or unique_email()
        resp = client.post("/api/auth/register", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["userId"]
        if not verified:
            return TestUser(id=user_id, email=email, token=None)
        token = mailer.last_token("verify", email)
        assert client.get("/api/auth/verify-email", params={"token": token}).status_code == 200
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return TestUser(id=user_id, email=email, token=resp.json()["token"])

    return _make
