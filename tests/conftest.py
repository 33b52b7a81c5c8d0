import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SUPABASE_PROJECT_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_JWKS_URL", "https://example.supabase.co/auth/v1/.well-known/jwks.json")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "x")

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.db import models  # noqa: F401
from app.db.base import Base
from app.db.models.chatflow import Chatflow
from app.db.models.profile import Profile
from app.db.models.workspace import Workspace, WorkspaceMember
from app.db.session import get_session_factory
from app.main import app
from app.middlewares.auth import current_user
from app.services.generation import get_schema_generator
from app.utils.ids import random_slug

ALICE = {"sub": "user-alice", "email": "alice@example.com", "name": "Alice"}
BOB = {"sub": "user-bob", "email": "bob@example.com", "name": "Bob"}

VALID_SCHEMA = {
    "fields": [
        {"id": "f1", "type": "text", "label": "Your name", "name": "full_name", "required": True},
        {"id": "f2", "type": "email", "label": "Email", "name": "email", "required": False},
    ]
}


async def fake_generator(description: str) -> dict:
    return {"name": "Contact form", **VALID_SCHEMA}


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest_asyncio.fixture
async def seed(session_factory):
    """alice es miembro de 'acme'; bob es miembro de 'globex'."""
    async with session_factory() as session:
        session.add_all([
            Profile(id=ALICE["sub"], email=ALICE["email"], name=ALICE["name"]),
            Profile(id=BOB["sub"], email=BOB["email"], name=BOB["name"]),
            Workspace(id="ws-acme", slug="acme", name="Acme Inc"),
            Workspace(id="ws-globex", slug="globex", name="Globex"),
        ])
        await session.flush()
        session.add_all([
            WorkspaceMember(profile_id=ALICE["sub"], workspace_id="ws-acme", role="OWNER"),
            WorkspaceMember(profile_id=BOB["sub"], workspace_id="ws-globex", role="OWNER"),
        ])
        await session.commit()
    return {"acme": "ws-acme", "globex": "ws-globex"}


@pytest.fixture
def auth_as():
    """auth_as["user"] decide quién hace el request."""
    return {"user": ALICE}


@pytest.fixture
def generator():
    return {"fn": fake_generator, "calls": []}


@pytest_asyncio.fixture
async def client(session_factory, seed, auth_as, generator):
    async def _generator(description: str) -> dict:
        generator["calls"].append(description)
        return await generator["fn"](description)

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[current_user] = lambda: auth_as["user"]
    app.dependency_overrides[get_schema_generator] = lambda: _generator
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def add_chatflow(session_factory):
    async def _add(**values) -> Chatflow:
        values.setdefault("name", "Untitled Chatflow")
        values.setdefault("schema", {})
        values.setdefault("share_url", random_slug())
        values.setdefault("workspace_id", "ws-acme")
        async with session_factory() as session:
            chatflow = Chatflow(**values)
            session.add(chatflow)
            await session.commit()
            await session.refresh(chatflow)
            return chatflow
    return _add
