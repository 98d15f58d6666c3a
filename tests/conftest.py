"""Pytest configuration and fixtures for quickorder.

Everything runs against the in-memory document store with unverified
identity claims accepted, so no Firestore project or Firebase token is needed.
"""

import os

os.environ["DATABASE_BACKEND"] = "memory"
os.environ["IDENTITY_ALLOW_UNVERIFIED_CLAIMS"] = "true"
os.environ["ROOT_ADMIN_EMAILS"] = "root@quickorder.test"
os.environ["ROOT_ADMIN_PHONES"] = "+91 90000 00001"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_ENABLED"] = "false"
os.environ["TELEMETRY_ENABLED"] = "false"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from quickorder.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from quickorder.api.v1.dependencies import build_session_services  # noqa: E402
from quickorder.application.session import SessionRegistry  # noqa: E402
from quickorder.infrastructure.firebase.identity import FirebaseIdentityVerifier  # noqa: E402
from quickorder.infrastructure.memory import MemoryDocumentStore  # noqa: E402
from quickorder.main import app  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), with startup/shutdown run."""
    transport = ASGITransport(app=app)
    async with app.router.lifespan_context(app):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
async def db() -> MemoryDocumentStore:
    store = MemoryDocumentStore()
    yield store
    await store.aclose()


@pytest.fixture
def identity() -> FirebaseIdentityVerifier:
    return FirebaseIdentityVerifier(project_id=None, allow_unverified_claims=True)


@pytest.fixture
async def registry(db: MemoryDocumentStore, identity: FirebaseIdentityVerifier) -> SessionRegistry:
    reg = SessionRegistry(build_session_services(db, identity, get_settings()))
    yield reg
    await reg.close_all()


@pytest.fixture
def app_db(client: AsyncClient) -> MemoryDocumentStore:
    """The document store wired into the running app (for seeding API tests)."""
    return app.state.document_store
