"""Pytest fixtures and configuration for DevCamper tests."""
import os
from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from beanie import init_beanie
from httpx import AsyncClient, ASGITransport
from jose import jwt
from mongomock_motor import AsyncMongoMockClient

os.environ.setdefault("DEVCAMPER_JWT_SECRET", "test-secret")
os.environ.setdefault("DEVCAMPER_DEBUG", "true")
os.environ.setdefault("DEVCAMPER_MONGODB_URL", "mongodb://localhost:27017")

from devcamper.auth.auth import Caller
from devcamper.main import app
from devcamper.models.documents import get_document_models
from devcamper.models.schemas import BootcampCreate
from devcamper.services.bootcamps import create_bootcamp

TEST_JWT_SECRET = "test-secret"


def make_token(
    subject: str,
    role: str = "publisher",
    secret: str = TEST_JWT_SECRET,
    expires_in: timedelta = timedelta(hours=1),
    **claims,
) -> str:
    """Mint a bearer token the way the identity service would."""
    now = datetime.now(timezone.utc)
    payload = {"sub": subject, "role": role, "iat": now, "exp": now + expires_in, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(subject: str, role: str = "publisher") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(subject, role)}"}


def bootcamp_data(**overrides) -> dict:
    data = {
        "name": "Devworks Bootcamp",
        "description": "Full stack web development",
        "careers": ["Web Development", "UI/UX"],
        "average_cost": 10000,
        "housing": True,
        "job_assistance": True,
        "job_guarantee": False,
    }
    data.update(overrides)
    return data


@pytest_asyncio.fixture
async def test_db():
    """Fresh in-memory MongoDB with Beanie initialized on it."""
    client = AsyncMongoMockClient()
    database = client["devcamper_test"]
    await init_beanie(database=database, document_models=get_document_models())
    yield database


@pytest_asyncio.fixture
async def client(test_db) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the in-memory database."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def publisher() -> Caller:
    return Caller(id="u1", role="publisher")


@pytest.fixture
def other_publisher() -> Caller:
    return Caller(id="u2", role="publisher")


@pytest.fixture
def admin() -> Caller:
    return Caller(id="admin-1", role="admin")


@pytest_asyncio.fixture
async def owned_bootcamp(test_db, publisher):
    """A bootcamp owned by the ``publisher`` caller."""
    return await create_bootcamp(BootcampCreate(**bootcamp_data()), publisher)
