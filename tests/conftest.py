"""Shared pytest fixtures: async test client, fake session and Redis."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock

import pytest
from factories import baseline
from httpx import ASGITransport, AsyncClient

from ricecast.auth.dependencies import get_current_user_id
from ricecast.auth.jwt import create_access_token
from ricecast.database import get_db
from ricecast.main import app
from ricecast.schemas.prediction import HistoricalBaseline


class FakeAsyncSession:
	def __init__(self) -> None:
		self.commit = AsyncMock()
		self.rollback = AsyncMock()
		self.close = AsyncMock()
		self.execute = AsyncMock()
		self.flush = AsyncMock()
		self.refresh = AsyncMock()
		self.delete = AsyncMock()
		self.get = AsyncMock(return_value=None)
		self.added: list[Any] = []

	def add(self, obj: Any) -> None:
		self.added.append(obj)

	def add_all(self, objs: list[Any]) -> None:
		self.added.extend(objs)


class FakeRedis:
	def __init__(self) -> None:
		self.setex = AsyncMock()
		self.get = AsyncMock(return_value=None)
		self.ping = AsyncMock(return_value=True)
		self._counter: dict[str, int] = {}
		self.incr = AsyncMock(side_effect=self._incr)
		self.expire = AsyncMock(return_value=True)

	async def _incr(self, key: str) -> int:
		value = self._counter.get(key, 0) + 1
		self._counter[key] = value
		return value


@pytest.fixture
def fake_db_session() -> FakeAsyncSession:
	"""A lightweight async-session stub for dependency overrides in API tests."""
	return FakeAsyncSession()


@pytest.fixture
def fake_redis() -> FakeRedis:
	return FakeRedis()


@pytest.fixture
def auth_user_id() -> uuid.UUID:
	return uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture
def access_token(auth_user_id: uuid.UUID) -> str:
	return create_access_token(str(auth_user_id), expires_minutes=30)


@pytest.fixture
def baselines_2025() -> list[HistoricalBaseline]:
	return [
		baseline(1, 2025, yield_tonnes_per_ha=4.42),
		baseline(2, 2025, yield_tonnes_per_ha=4.05),
		baseline(3, 2025, yield_tonnes_per_ha=3.86),
		baseline(4, 2025, yield_tonnes_per_ha=4.28),
	]


@asynccontextmanager
async def _noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
	yield


@pytest.fixture
async def client(
	fake_db_session: FakeAsyncSession,
	auth_user_id: uuid.UUID,
) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled, DB and caller identity mocked."""

	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield fake_db_session

	async def override_current_user_id() -> uuid.UUID:
		return auth_user_id

	app.dependency_overrides[get_db] = override_get_db
	app.dependency_overrides[get_current_user_id] = override_current_user_id
	app.state.redis = None
	original_lifespan = app.router.lifespan_context
	app.router.lifespan_context = _noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()
	app.state.redis = None


@pytest.fixture
async def auth_client(fake_db_session: FakeAsyncSession) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with DB override only (real auth dependency active)."""

	async def override_get_db() -> AsyncGenerator[Any, None]:
		yield fake_db_session

	app.dependency_overrides[get_db] = override_get_db
	app.state.redis = None
	original_lifespan = app.router.lifespan_context
	app.router.lifespan_context = _noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()
