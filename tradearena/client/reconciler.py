"""Merges snapshot and score_update messages into a ranked view."""

from typing import Iterable, Optional, Union

from tradearena.models import ScoreUpdateMessage, SnapshotMessage, Trader, rank_traders


class LeaderboardReconciler:
    """
    Ranked view of one competition, derived from the feed.

    A snapshot replaces the roster; a score_update upserts the new
    absolute scores by name. The view is fully re-sorted after every
    message (score descending, then name), so the result depends only
    on the latest score per trader and not on arrival order.
    """

    def __init__(self, competition_id: str, traders: Optional[Iterable[Trader]] = None):
        self.competition_id = competition_id
        self._ranked: list[Trader] = []
        if traders is not None:
            self.seed(traders)

    @property
    def ranked(self) -> list[Trader]:
        return list(self._ranked)

    def seed(self, traders: Iterable[Trader]) -> None:
        """Replace the view, e.g. with an HTTP leaderboard response."""
        scores = {t.name: t.score for t in traders}
        self._rerank(scores)

    def apply(self, message: Union[SnapshotMessage, ScoreUpdateMessage]) -> bool:
        """
        Merge one feed message into the view.

        Returns:
            False if the message belongs to another competition
        """
        if message.competitionId != self.competition_id:
            return False

        if isinstance(message, SnapshotMessage):
            self.seed(message.traders)
        else:
            scores = {t.name: t.score for t in self._ranked}
            for update in message.updates:
                scores[update.name] = update.score
            self._rerank(scores)
        return True

    def _rerank(self, scores: dict[str, float]) -> None:
        self._ranked = rank_traders(
            Trader(name=name, score=score) for name, score in scores.items()
        )
