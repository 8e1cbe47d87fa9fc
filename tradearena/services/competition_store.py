"""In-memory competition store with join and score mutation."""

import asyncio
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from tradearena.config import Config
from tradearena.errors import (
    CompetitionNotFoundError,
    InvalidRequestError,
    PersistenceWriteError,
)
from tradearena.models import (
    Competition,
    CompetitionSummary,
    Leaderboard,
    SnapshotMessage,
    Trader,
    rank_traders,
)
from tradearena.storage import CompetitionRepository

logger = logging.getLogger(__name__)


def round2(value: float) -> float:
    """Round to the two-decimal precision scores are kept in."""
    return round(value, 2)


def schedule_competitions(
    definitions: Iterable[dict[str, Any]],
    started_at: datetime,
    config: Config,
) -> list[Competition]:
    """
    Build competitions from static definitions.

    Start and end times are derived from ``started_at`` and the configured
    per-index offsets; any times present in the definitions are ignored.

    Args:
        definitions: Dicts with id, name, entryFee, prizePool and optional traders
        started_at: Process start time
        config: Supplies start offsets and competition duration

    Returns:
        Competitions in definition order
    """
    duration = timedelta(seconds=config.competition_duration_seconds)
    competitions = []

    for index, definition in enumerate(definitions):
        start_at = started_at + timedelta(seconds=config.start_offset_for(index))
        competitions.append(
            Competition(
                id=definition["id"],
                name=definition["name"],
                entryFee=definition.get("entryFee", 0),
                prizePool=definition.get("prizePool", 0),
                startAt=start_at,
                endAt=start_at + duration,
                traders=definition.get("traders", []),
            )
        )

    return competitions


class CompetitionStore:
    """
    Owns every competition and roster for the life of the process.

    All roster mutation happens in synchronous code, so on a single
    event loop a join and a score tick never interleave. Only the
    durable write awaits, and it runs after the roster has changed.
    """

    def __init__(
        self,
        competitions: list[Competition],
        repository: Optional[CompetitionRepository] = None,
    ):
        ids = [c.id for c in competitions]
        if len(ids) != len(set(ids)):
            raise ValueError("Competition ids must be unique")

        self._competitions: dict[str, Competition] = {c.id: c for c in competitions}
        self.repository = repository
        self._persist_lock = asyncio.Lock()

    @classmethod
    def load(
        cls,
        config: Config,
        repository: Optional[CompetitionRepository] = None,
        started_at: Optional[datetime] = None,
    ) -> "CompetitionStore":
        """
        Create the store at process start.

        Uses the repository's saved roster when there is one, otherwise
        the bundled competition definitions.
        """
        started_at = started_at or datetime.now(timezone.utc)

        definitions = repository.load() if repository is not None else None
        if definitions is None:
            logger.info(f"Loading competition definitions from {config.definitions_path}")
            with Path(config.definitions_path).open("r", encoding="utf-8") as f:
                definitions = json.load(f)["competitions"]

        competitions = schedule_competitions(definitions, started_at, config)
        logger.info(
            f"Loaded {len(competitions)} competitions with "
            f"{sum(len(c.traders) for c in competitions)} traders"
        )
        return cls(competitions, repository=repository)

    def competition_ids(self) -> list[str]:
        return list(self._competitions)

    def get(self, competition_id: str) -> Competition:
        """Return the live competition object for ``competition_id``."""
        competition = self._competitions.get(competition_id)
        if competition is None:
            raise CompetitionNotFoundError(competition_id)
        return competition

    def list_competitions(self, now: Optional[datetime] = None) -> list[CompetitionSummary]:
        """List every competition with its participant count and status."""
        now = now or datetime.now(timezone.utc)
        return [
            CompetitionSummary(
                id=c.id,
                name=c.name,
                entryFee=c.entryFee,
                prizePool=c.prizePool,
                participants=len(c.traders),
                startAt=c.startAt,
                endAt=c.endAt,
                status=c.status_at(now),
            )
            for c in self._competitions.values()
        ]

    async def join(self, competition_id: Optional[str], username: Optional[str]) -> int:
        """
        Add ``username`` to a competition's roster.

        Joining twice is a no-op. A new entry starts at score 0 and
        triggers a full save; a failed save is logged and the join
        still counts.

        Returns:
            Number of participants after the join

        Raises:
            InvalidRequestError: If either argument is missing
            CompetitionNotFoundError: If the competition id is unknown
        """
        if not competition_id or not username:
            raise InvalidRequestError("competitionId and username required")

        competition = self.get(competition_id)
        if competition.find_trader(username) is not None:
            return len(competition.traders)

        competition.traders.append(Trader(name=username, score=0.0))
        participants = len(competition.traders)
        logger.info(f"{username} joined {competition_id} ({participants} participants)")

        await self.persist()
        return participants

    async def persist(self) -> bool:
        """
        Save every competition to the repository.

        Returns:
            True if the write succeeded or there is no repository
        """
        if self.repository is None:
            return True

        async with self._persist_lock:
            # Serialize under the lock so the last write carries the newest state
            payload = self.dump()
            try:
                await asyncio.to_thread(self.repository.save, payload)
            except PersistenceWriteError as e:
                logger.error(f"Failed to persist competitions data: {e}")
                return False
        return True

    def dump(self) -> list[dict[str, Any]]:
        """Plain-JSON copy of all competitions for the durable store."""
        return [c.model_dump(mode="json") for c in self._competitions.values()]

    def joined_competition_ids(self, username: Optional[str]) -> list[str]:
        """
        Ids of the competitions whose roster contains ``username``.

        Raises:
            InvalidRequestError: If username is missing
        """
        if not username:
            raise InvalidRequestError("username required")
        return [
            c.id for c in self._competitions.values()
            if c.find_trader(username) is not None
        ]

    def leaderboard(self, competition_id: str) -> Leaderboard:
        """Ranked copy of one competition's roster."""
        competition = self.get(competition_id)
        return Leaderboard(
            id=competition.id,
            name=competition.name,
            traders=rank_traders(t.model_copy() for t in competition.traders),
        )

    def snapshots(self) -> list[SnapshotMessage]:
        """One snapshot message per competition, copied at a single point in time."""
        return [
            SnapshotMessage(
                competitionId=c.id,
                traders=rank_traders(t.model_copy() for t in c.traders),
            )
            for c in self._competitions.values()
        ]

    def apply_score_deltas(
        self,
        competition_id: str,
        draws: Iterable[tuple[int, float]],
    ) -> list[Trader]:
        """
        Apply score changes to roster slots as one operation.

        Args:
            competition_id: Competition to mutate
            draws: ``(roster index, delta)`` pairs; an index may repeat

        Returns:
            Each touched trader once, in first-touch order, with its final score
        """
        competition = self.get(competition_id)
        touched: dict[str, Trader] = {}

        for index, delta in draws:
            trader = competition.traders[index]
            trader.score = round2(trader.score + delta)
            touched[trader.name] = trader

        return [Trader(name=t.name, score=t.score) for t in touched.values()]
