"""Competition models for the store and API responses."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    model_validator,
)

from .leaderboard import Trader

# Whole amounts stay integers on the wire
Amount = Union[NonNegativeInt, NonNegativeFloat]


class CompetitionStatus(str, Enum):
    """Where a competition sits relative to its schedule."""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    FINISHED = "finished"


class Competition(BaseModel):
    """
    A time-boxed competition and its roster.
    
    The roster keeps join order. Entries are appended on join and
    their scores are mutated in place; nothing is ever removed.
    """
    model_config = ConfigDict(populate_by_name=True)
    
    id: str
    name: str
    entryFee: Amount = Field(description="Entry fee")
    prizePool: Amount = Field(description="Prize pool")
    startAt: datetime
    endAt: datetime
    traders: list[Trader] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_schedule(self) -> "Competition":
        if self.endAt <= self.startAt:
            raise ValueError("endAt must be after startAt")
        return self

    def find_trader(self, name: str) -> Optional[Trader]:
        """Return the roster entry for ``name``, if any."""
        for trader in self.traders:
            if trader.name == name:
                return trader
        return None

    def status_at(self, now: datetime) -> CompetitionStatus:
        """Status of the competition at ``now``."""
        if now < self.startAt:
            return CompetitionStatus.UPCOMING
        if now < self.endAt:
            return CompetitionStatus.ACTIVE
        return CompetitionStatus.FINISHED


class CompetitionSummary(BaseModel):
    """Read-only projection of a competition for listings."""
    model_config = ConfigDict(populate_by_name=True)
    
    id: str
    name: str
    entryFee: Amount
    prizePool: Amount
    participants: int = Field(description="Roster size")
    startAt: datetime
    endAt: datetime
    status: CompetitionStatus


class CompetitionList(BaseModel):
    """Response for the competition listing."""
    competitions: list[CompetitionSummary]


class JoinRequest(BaseModel):
    """
    Join request body.
    
    Fields are optional here so that missing values surface as a
    400 with a readable message instead of a schema error.
    """
    competitionId: Optional[str] = None
    username: Optional[str] = None


class JoinResponse(BaseModel):
    """Result of a join."""
    success: bool = True
    participants: int


class JoinedCompetitionsRequest(BaseModel):
    """Body for looking up the competitions a user has joined."""
    username: Optional[str] = None


class JoinedCompetitions(BaseModel):
    """Competition ids whose roster contains the user."""
    competitionIds: list[str]
