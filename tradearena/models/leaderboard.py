"""Trader and leaderboard models."""

from typing import Iterable

from pydantic import BaseModel, Field, ConfigDict


class Trader(BaseModel):
    """
    A roster entry: a viewer's username and their current score.
    
    Also used as the ``{name, score}`` pair carried by feed messages,
    where ``score`` is always the new absolute value.
    """
    model_config = ConfigDict(populate_by_name=True)
    
    name: str
    score: float = Field(default=0.0, description="Signed score, two-decimal precision")


class Leaderboard(BaseModel):
    """Ranked roster of one competition."""
    model_config = ConfigDict(populate_by_name=True)
    
    id: str
    name: str
    traders: list[Trader] = Field(description="Sorted by score descending, then name")


def ranking_key(trader: Trader) -> tuple[float, str]:
    """Sort key: score descending, equal scores by name ascending."""
    return (-trader.score, trader.name)


def rank_traders(traders: Iterable[Trader]) -> list[Trader]:
    """Return a new list of traders in leaderboard order."""
    return sorted(traders, key=ranking_key)
