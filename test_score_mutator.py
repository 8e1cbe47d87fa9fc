"""Tests for the random-walk score mutator."""

import random

import pytest

from tradearena.models import ScoreUpdateMessage
from tradearena.services import CompetitionStore, ScoreMutator


class RecordingHub:
    """Stands in for the broadcast hub and keeps what it was given."""

    def __init__(self):
        self.messages = []

    def broadcast(self, message):
        self.messages.append(message)
        return 1


@pytest.fixture
def hub():
    return RecordingHub()


async def _grow(store, competition_id, count):
    for i in range(count):
        await store.join(competition_id, f"trader-{i}")


@pytest.mark.parametrize("seed", range(5))
async def test_tick_is_bounded(store, hub, seed):
    """Each touched score moves by at most 5 and at most three traders change."""
    await _grow(store, "Alpha", 6)
    await _grow(store, "Beta", 4)
    mutator = ScoreMutator(store, hub, rng=random.Random(seed))

    for _ in range(50):
        before = {
            c: {t.name: t.score for t in store.get(c).traders}
            for c in store.competition_ids()
        }
        message = mutator.tick()

        assert message is not None
        roster = store.get(message.competitionId).traders
        old = before[message.competitionId]
        names = [u.name for u in message.updates]
        assert len(names) == len(set(names))
        assert 1 <= len(names) <= min(3, len(roster))
        for update in message.updates:
            assert abs(update.score - old[update.name]) <= 5 + 1e-9
            assert update.score == round(update.score, 2)

        changed = {
            t.name for t in roster if t.score != old[t.name]
        }
        assert changed <= set(names)


async def test_updates_carry_final_scores(store, hub):
    await _grow(store, "Alpha", 3)
    mutator = ScoreMutator(store, hub, rng=random.Random(1))

    for _ in range(20):
        message = mutator.tick()
        if message is None:
            continue
        current = {t.name: t.score for t in store.get(message.competitionId).traders}
        for update in message.updates:
            assert update.score == current[update.name]


def test_tick_broadcasts_score_update(store, hub):
    mutator = ScoreMutator(store, hub, rng=random.Random(3))

    messages = [m for m in (mutator.tick() for _ in range(20)) if m is not None]

    assert messages
    assert hub.messages == messages
    assert all(isinstance(m, ScoreUpdateMessage) for m in messages)
    # Beta has no traders, so every update is for Alpha
    assert {m.competitionId for m in messages} == {"Alpha"}


def test_empty_rosters_emit_nothing(config, hub):
    store = CompetitionStore.load(config)
    for competition_id in store.competition_ids():
        store.get(competition_id).traders.clear()
    mutator = ScoreMutator(store, hub, rng=random.Random(0))

    assert all(mutator.tick() is None for _ in range(10))
    assert hub.messages == []


def test_no_competitions_idles(hub):
    mutator = ScoreMutator(CompetitionStore([]), hub)

    assert mutator.tick() is None


async def test_single_trader_roster(store, hub):
    await store.join("Beta", "solo")
    store.get("Alpha").traders.clear()
    mutator = ScoreMutator(store, hub, rng=random.Random(5))

    messages = [m for m in (mutator.tick() for _ in range(10)) if m is not None]
    assert messages
    message = messages[0]
    assert message.competitionId == "Beta"
    assert [u.name for u in message.updates] == ["solo"]
