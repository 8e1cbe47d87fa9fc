"""Tests for the HTTP endpoints, the API client and the leaderboard view."""

import pytest
from httpx import AsyncClient, ASGITransport

from conftest import FakeRepository
from tradearena.client import CompetitionApiClient, ConnectionMultiplexer, ConnectionStatus, LeaderboardView
from tradearena.errors import CompetitionNotFoundError, InvalidRequestError
from tradearena.models import Leaderboard, Trader


@pytest.fixture
async def api(app):
    api = CompetitionApiClient("http://test", token="opaque-token", transport=ASGITransport(app=app))
    yield api
    await api.close()


async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


async def test_list_competitions(client: AsyncClient):
    resp = await client.get("/v1/competitions")
    assert resp.status_code == 200

    competitions = resp.json()["competitions"]
    assert [c["id"] for c in competitions] == ["Alpha", "Beta"]
    alpha = competitions[0]
    assert alpha["participants"] == 2
    assert alpha["entryFee"] == 10 and isinstance(alpha["entryFee"], int)
    assert alpha["prizePool"] == 1000
    assert alpha["status"] == "active"
    assert competitions[1]["status"] == "upcoming"
    assert "startAt" in alpha and "endAt" in alpha


async def test_join_and_rejoin(client: AsyncClient, repository: FakeRepository):
    body = {"competitionId": "Alpha", "username": "C"}

    first = await client.post("/v1/join", json=body)
    second = await client.post("/v1/join", json=body)

    assert first.status_code == second.status_code == 200
    assert first.json() == {"success": True, "participants": 3}
    assert second.json() == {"success": True, "participants": 3}
    assert len(repository.saves) == 1


async def test_join_unknown_competition(client: AsyncClient):
    resp = await client.post("/v1/join", json={"competitionId": "Gamma", "username": "C"})

    assert resp.status_code == 404
    assert resp.json() == {"message": "competition not found"}


async def test_join_missing_fields(client: AsyncClient):
    resp = await client.post("/v1/join", json={"competitionId": "Alpha"})

    assert resp.status_code == 400
    assert resp.json() == {"message": "competitionId and username required"}


async def test_join_succeeds_when_save_fails(client: AsyncClient, repository: FakeRepository):
    repository.fail = True

    resp = await client.post("/v1/join", json={"competitionId": "Beta", "username": "C"})

    assert resp.status_code == 200
    assert resp.json()["participants"] == 1


async def test_my_competitions(client: AsyncClient):
    await client.post("/v1/join", json={"competitionId": "Beta", "username": "A"})

    resp = await client.post("/v1/my-competitions", json={"username": "A"})
    assert resp.json() == {"competitionIds": ["Alpha", "Beta"]}

    resp = await client.post("/v1/my-competitions", json={})
    assert resp.status_code == 400


async def test_leaderboard_endpoint(app, client: AsyncClient):
    app.state.store.apply_score_deltas("Alpha", [(1, 2.25)])

    resp = await client.get("/v1/competitions/Alpha/leaderboard")

    assert resp.status_code == 200
    assert resp.json() == {
        "id": "Alpha",
        "name": "Alpha",
        "traders": [{"name": "B", "score": 2.25}, {"name": "A", "score": 0.0}],
    }


async def test_leaderboard_unknown_competition(client: AsyncClient):
    resp = await client.get("/v1/competitions/Gamma/leaderboard")
    assert resp.status_code == 404


async def test_api_client_round_trip(api: CompetitionApiClient):
    competitions = await api.list_competitions()
    assert [c.participants for c in competitions] == [2, 0]

    assert await api.join("Alpha", "C") == 3
    assert await api.joined_competition_ids("C") == ["Alpha"]

    leaderboard = await api.leaderboard("Alpha")
    assert [t.name for t in leaderboard.traders] == ["A", "B", "C"]


async def test_api_client_errors(api: CompetitionApiClient):
    with pytest.raises(CompetitionNotFoundError) as exc_info:
        await api.leaderboard("Gamma")
    assert exc_info.value.competition_id == "Gamma"

    with pytest.raises(InvalidRequestError):
        await api.join("Alpha", "")


async def test_leaderboard_view_follows_feed(app, api, transports):
    """A view seeds from HTTP, then applies feed messages for its competition only."""
    multiplexer = ConnectionMultiplexer(transports)
    changes = []
    view = LeaderboardView("Alpha", multiplexer, api=api, on_change=changes.append)

    await view.open()
    assert view.name == "Alpha"
    assert [t.name for t in view.ranked] == ["A", "B"]
    assert view.status == ConnectionStatus.CONNECTING

    transports.last.open()
    transports.last.deliver({"type": "score_update", "competitionId": "Beta", "updates": [{"name": "Z", "score": 1}]})
    transports.last.deliver({"type": "score_update", "competitionId": "Alpha", "updates": [{"name": "B", "score": 1.5}]})

    assert view.status == ConnectionStatus.OPEN
    assert [(t.name, t.score) for t in view.ranked] == [("B", 1.5), ("A", 0.0)]
    assert len(changes) == 1

    view.close()
    assert multiplexer.subscriber_count == 0
    assert transports.last.close_calls == 0


async def test_two_views_share_the_connection(transports):
    multiplexer = ConnectionMultiplexer(transports)
    alpha = LeaderboardView("Alpha", multiplexer)
    beta = LeaderboardView("Beta", multiplexer)

    await alpha.open()
    await beta.open()

    assert len(transports.created) == 1
    transports.last.open()
    transports.last.deliver({"type": "snapshot", "competitionId": "Beta", "traders": [{"name": "Z", "score": 2}]})

    assert alpha.ranked == []
    assert [t.name for t in beta.ranked] == ["Z"]


class SeedingApi:
    """API stand-in whose leaderboard call lets the feed run first."""

    def __init__(self, traders, while_loading=None, error=None):
        self.traders = traders
        self.while_loading = while_loading
        self.error = error

    async def leaderboard(self, competition_id):
        if self.while_loading is not None:
            self.while_loading()
        if self.error is not None:
            raise self.error
        return Leaderboard(id=competition_id, name=competition_id, traders=self.traders)


async def test_view_keeps_updates_received_while_loading(transports):
    multiplexer = ConnectionMultiplexer(transports)

    def feed_update():
        transports.last.open()
        transports.last.deliver({"type": "score_update", "competitionId": "Alpha", "updates": [{"name": "B", "score": 2.0}]})

    stale = [Trader(name="A", score=1.0), Trader(name="B", score=0.0)]
    view = LeaderboardView("Alpha", multiplexer, api=SeedingApi(stale, feed_update))
    await view.open()

    assert [(t.name, t.score) for t in view.ranked] == [("B", 2.0), ("A", 1.0)]


async def test_view_prefers_snapshot_over_http_seed(transports):
    multiplexer = ConnectionMultiplexer(transports)

    def feed_snapshot():
        transports.last.open()
        transports.last.deliver({"type": "snapshot", "competitionId": "Alpha", "traders": [{"name": "C", "score": 4}]})

    stale = [Trader(name="A", score=1.0)]
    view = LeaderboardView("Alpha", multiplexer, api=SeedingApi(stale, feed_snapshot))
    await view.open()

    assert view.name == "Alpha"
    assert [(t.name, t.score) for t in view.ranked] == [("C", 4.0)]


async def test_view_unsubscribes_when_seed_fails(transports):
    multiplexer = ConnectionMultiplexer(transports)
    view = LeaderboardView(
        "Gamma", multiplexer, api=SeedingApi([], error=CompetitionNotFoundError("Gamma"))
    )

    with pytest.raises(CompetitionNotFoundError):
        await view.open()

    assert not view.is_open
    assert multiplexer.subscriber_count == 0
