"""Shared fixtures: in-memory database, HTTP client, fake model replies."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from services import llm
from services.auth import create_token
from services.db import Base, get_session

USER_ID = "user-1"


@pytest.fixture()
async def sessionmaker():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(eng, expire_on_commit=False)
    await eng.dispose()


@pytest.fixture()
async def client(sessionmaker):
    async def _override():
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_session] = _override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token(USER_ID)}"}


@pytest.fixture()
def fake_llm(monkeypatch):
    """Replace the model call; tests set `.reply` (str or exception)."""

    class _Fake:
        reply: str | Exception = "{}"
        prompts: list[str] = []

        async def __call__(self, prompt: str, **kwargs) -> str:
            self.prompts.append(prompt)
            if isinstance(self.reply, Exception):
                raise self.reply
            return self.reply

    fake = _Fake()
    fake.prompts = []
    monkeypatch.setattr(llm, "agenerate", fake)
    return fake
