"""Tests for the periodic task and configuration loading."""

import asyncio

import pytest

from tradearena.config import Config, DAY_SECONDS, HOUR_SECONDS
from tradearena.services import PeriodicTask


async def test_periodic_task_runs_until_stopped():
    calls = []
    task = PeriodicTask(0.01, lambda: calls.append(1), name="test")

    task.start()
    task.start()
    await asyncio.sleep(0.06)
    await task.stop()
    count = len(calls)
    await asyncio.sleep(0.03)

    assert count >= 2
    assert len(calls) == count
    assert not task.running


async def test_periodic_task_survives_failures():
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("first run fails")

    task = PeriodicTask(0.01, flaky)
    task.start()
    await asyncio.sleep(0.06)
    await task.stop()

    assert len(calls) >= 2


def test_periodic_task_rejects_bad_interval():
    with pytest.raises(ValueError):
        PeriodicTask(0, lambda: None)


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("SCORE_INTERVAL_SECONDS", "0.5")
    monkeypatch.setenv("COMPETITION_DURATION_HOURS", "2")
    monkeypatch.setenv("RANDOM_SEED", "13")

    config = Config.from_env()

    assert config.port == 9000
    assert config.score_interval_seconds == 0.5
    assert config.competition_duration_seconds == 2 * HOUR_SECONDS
    assert config.random_seed == 13


def test_start_offsets():
    config = Config()

    assert [config.start_offset_for(i) for i in range(4)] == [0.0, HOUR_SECONDS, DAY_SECONDS, 0.0]
