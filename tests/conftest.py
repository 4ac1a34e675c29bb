"""Shared test fixtures for pytest.

We set minimal env defaults (ENVIRONMENT, the Supabase JWT secret) early so
importing modules that instantiate settings succeeds without needing an
external .env file during tests.
"""

import os
from collections.abc import AsyncGenerator, AsyncIterator, Generator, Sequence
from datetime import timedelta

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient


os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")  # pragma: allowlist secret

from core.security import create_access_token
from dependencies.auth import get_current_user
from dependencies.db import get_db
from main import app
from schemas.auth import CurrentUser
from services.ai.candidates import Candidate


TEST_USER_ID = "11111111-2222-3333-4444-555555555555"


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.
    """
    with TestClient(app) as client:
        yield client


class _FakeResult:
    """Lightweight stand-in for a SQLAlchemy result."""

    def scalars(self):
        return self

    def all(self):
        return []

    def first(self):  # pragma: no cover - trivial
        return None

    def scalar_one_or_none(self):
        return None


class _FakeSession:
    """Minimal fake async session used in lightweight tests.

    Only the small surface area required by current tests is implemented.
    """

    def add(self, _obj):  # pragma: no cover - no-op
        return None

    async def flush(self):  # pragma: no cover - no-op
        return None

    async def execute(self, _stmt):  # Always empty result
        return _FakeResult()

    async def commit(self):  # pragma: no cover - no-op
        return None

    async def refresh(self, _obj):  # pragma: no cover - no-op
        return None

    async def rollback(self):  # pragma: no cover - no-op
        return None

    async def close(self):  # pragma: no cover - no-op
        return None


async def _override_get_db_factory() -> AsyncGenerator[_FakeSession, None]:
    """Yield a fake session for dependency override."""
    fake = _FakeSession()
    try:
        yield fake
    finally:  # pragma: no cover - cleanup path
        await fake.close()


async def _override_get_current_user_factory() -> CurrentUser:
    return CurrentUser(id=TEST_USER_ID, email="demo@example.test")


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async client with DB & auth overrides (auto-auth)."""
    app.dependency_overrides[get_db] = _override_get_db_factory
    app.dependency_overrides[get_current_user] = _override_get_current_user_factory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_current_user, None)


@pytest_asyncio.fixture
async def anon_client() -> AsyncGenerator[AsyncClient, None]:
    """Async client with only the DB overridden; auth runs for real."""
    app.dependency_overrides[get_db] = _override_get_db_factory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Bearer header carrying a Supabase-style token for TEST_USER_ID."""
    token = create_access_token(
        {"sub": TEST_USER_ID, "email": "demo@example.test", "role": "authenticated"},
        expires_delta=timedelta(minutes=5),
    )
    return {"Authorization": f"Bearer {token}"}


# -----------------------------------------------------------------------------
# Upstream fakes
# -----------------------------------------------------------------------------


class ScriptedUpstream:
    """UpstreamClient fake driven by a per-key script.

    Each key maps to a list of fragments; an Exception in the list is raised
    at that point in the stream. A bare Exception fails the call outright.
    Keys missing from the script fail as well.
    """

    def __init__(self, script: dict[str, list[str | Exception] | Exception]) -> None:
        self.script = script
        self.calls: list[str] = []
        self.prompts: list[str] = []

    def _outcome(self, candidate: Candidate, prompt: str) -> list[str | Exception]:
        self.calls.append(candidate.api_key)
        self.prompts.append(prompt)
        outcome = self.script.get(candidate.api_key, RuntimeError("no script"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def stream_text(self, candidate: Candidate, prompt: str) -> AsyncIterator[str]:
        for item in self._outcome(candidate, prompt):
            if isinstance(item, Exception):
                raise item
            yield item

    async def complete_text(self, candidate: Candidate, prompt: str) -> str:
        parts = self._outcome(candidate, prompt)
        for item in parts:
            if isinstance(item, Exception):
                raise item
        return "".join(str(p) for p in parts)


@pytest.fixture
def scripted_upstream():
    """Factory for ScriptedUpstream instances."""
    return ScriptedUpstream


@pytest.fixture
def make_candidates():
    def _make(keys: Sequence[str], model_name: str = "gemini-2.5-flash") -> list[Candidate]:
        return [
            Candidate(api_key=key, model_name=model_name, key_index=index)
            for index, key in enumerate(keys)
        ]

    return _make
