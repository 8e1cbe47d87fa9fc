"""A mounted leaderboard view on top of the shared connection."""

import logging
from typing import Callable, Optional

from tradearena.models import Trader
from .api_client import CompetitionApiClient
from .multiplexer import ConnectionMultiplexer, ConnectionStatus, FeedMessage
from .reconciler import LeaderboardReconciler

logger = logging.getLogger(__name__)


class LeaderboardView:
    """
    Live ranked leaderboard for one competition.

    Opening the view subscribes to the shared feed first and then loads
    the current leaderboard over HTTP (when an API client is given), so
    no update is missed while the request is in flight. Closing it
    unsubscribes but leaves the shared connection open for other views.
    """

    def __init__(
        self,
        competition_id: str,
        multiplexer: ConnectionMultiplexer,
        api: Optional[CompetitionApiClient] = None,
        on_change: Optional[Callable[[list[Trader]], None]] = None,
    ):
        self.competition_id = competition_id
        self.multiplexer = multiplexer
        self.api = api
        self.on_change = on_change
        self.name: Optional[str] = None
        self.status = multiplexer.status
        self.reconciler = LeaderboardReconciler(competition_id)
        self._unsubscribers: list[Callable[[], None]] = []
        self._snapshot_seen = False
        # Feed messages received while the HTTP seed is loading
        self._buffer: Optional[list[FeedMessage]] = None

    @property
    def ranked(self) -> list[Trader]:
        return self.reconciler.ranked

    @property
    def is_open(self) -> bool:
        return bool(self._unsubscribers)

    async def open(self) -> None:
        """
        Subscribe to the feed and load the initial leaderboard.

        Raises:
            CompetitionNotFoundError: If the API does not know the competition
        """
        if self.is_open:
            return
        self._unsubscribers = [
            self.multiplexer.subscribe_messages(self._on_message),
            self.multiplexer.subscribe_status(self._on_status),
        ]
        if self.api is None:
            return

        self._buffer = []
        try:
            leaderboard = await self.api.leaderboard(self.competition_id)
        except Exception:
            self.close()
            raise
        finally:
            buffered, self._buffer = self._buffer, None

        self.name = leaderboard.name
        if not self._snapshot_seen:
            # Updates carry absolute scores, so replaying them over the
            # seed leaves each trader at its latest known score
            self.reconciler.seed(leaderboard.traders)
            for message in buffered:
                self.reconciler.apply(message)

    def close(self) -> None:
        """Stop following the feed. The shared connection stays up."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _on_message(self, message: FeedMessage) -> None:
        if message.competitionId != self.competition_id:
            return
        if message.type == "snapshot":
            self._snapshot_seen = True
        if self._buffer is not None:
            self._buffer.append(message)
        if self.reconciler.apply(message) and self.on_change is not None:
            self.on_change(self.reconciler.ranked)

    def _on_status(self, status: ConnectionStatus) -> None:
        self.status = status
        if status == ConnectionStatus.CLOSED:
            logger.info(f"Leaderboard {self.competition_id} stopped receiving updates")
