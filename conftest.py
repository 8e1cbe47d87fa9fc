"""
Pytest configuration and shared fixtures.
"""
import json
from datetime import datetime, timezone
from typing import Any, Optional

import pytest
from httpx import AsyncClient, ASGITransport

from tradearena.app import create_app
from tradearena.client import Transport, TransportHandlers
from tradearena.config import Config
from tradearena.errors import PersistenceWriteError, TransportError
from tradearena.services import CompetitionStore
from tradearena.storage import CompetitionRepository

STARTED_AT = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)

DEFINITIONS = [
    {
        "id": "Alpha",
        "name": "Alpha",
        "entryFee": 10,
        "prizePool": 1000,
        "traders": [{"name": "A", "score": 0}, {"name": "B", "score": 0}],
    },
    {
        "id": "Beta",
        "name": "Beta",
        "entryFee": 0,
        "prizePool": 250,
        "traders": [],
    },
]


class FakeRepository(CompetitionRepository):
    """In-memory repository that records every save."""

    def __init__(self, saved: Optional[list[dict[str, Any]]] = None, fail: bool = False):
        self.saved = saved
        self.fail = fail
        self.saves: list[list[dict[str, Any]]] = []

    def load(self) -> Optional[list[dict[str, Any]]]:
        return self.saved

    def save(self, competitions: list[dict[str, Any]]) -> None:
        if self.fail:
            raise PersistenceWriteError("disk full")
        self.saves.append(competitions)
        self.saved = competitions


class FakeTransport(Transport):
    """Transport driven by the test instead of a network."""

    def __init__(self, handlers: TransportHandlers):
        self.handlers = handlers
        self._closed = False
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self.close_calls += 1
        self._closed = True
        self.handlers.on_close(None)

    def open(self) -> None:
        self.handlers.on_open()

    def deliver(self, payload: Any) -> None:
        frame = payload if isinstance(payload, str) else json.dumps(payload)
        self.handlers.on_message(frame)

    def drop(self, reason: str = "connection reset") -> None:
        self._closed = True
        self.handlers.on_close(TransportError(reason))


class FakeTransportFactory:
    """Transport factory that keeps every transport it creates."""

    def __init__(self):
        self.created: list[FakeTransport] = []

    def __call__(self, handlers: TransportHandlers) -> FakeTransport:
        transport = FakeTransport(handlers)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


@pytest.fixture
def config(tmp_path) -> Config:
    """Config with two competitions and a mutator that never fires on its own."""
    definitions = tmp_path / "definitions.json"
    definitions.write_text(json.dumps({"competitions": DEFINITIONS}))
    return Config(
        data_path=str(tmp_path / "saved" / "competitions.json"),
        definitions_path=str(definitions),
        score_interval_seconds=3600.0,
        random_seed=7,
    )


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def store(config, repository) -> CompetitionStore:
    return CompetitionStore.load(config, repository=repository, started_at=STARTED_AT)


@pytest.fixture
def transports() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
async def app(config, repository):
    """App with its lifespan running (store, hub and mutator on app.state)."""
    app = create_app(config, repository=repository)
    async with app.router.lifespan_context(app):
        yield app


@pytest.fixture
async def client(app):
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
