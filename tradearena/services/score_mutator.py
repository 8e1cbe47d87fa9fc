"""Random-walk score updates that keep the leaderboards moving."""

import logging
import random
from typing import Optional

from tradearena.models import ScoreUpdateMessage
from .broadcast_hub import BroadcastHub
from .competition_store import CompetitionStore, round2

logger = logging.getLogger(__name__)

MAX_TRADERS_PER_TICK = 3
MAX_SCORE_STEP = 5.0


class ScoreMutator:
    """
    Perturbs a few traders' scores in one random competition per tick.

    Stands in for a real pricing feed: each tick picks a competition,
    draws up to three distinct roster slots and moves each drawn score
    by at most 5 in either direction.
    """

    def __init__(
        self,
        store: CompetitionStore,
        hub: Optional[BroadcastHub] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.hub = hub
        self.rng = rng or random.Random()

    def tick(self) -> Optional[ScoreUpdateMessage]:
        """
        Run one mutation step and broadcast the result.

        Returns:
            The broadcast message, or None if nothing changed
        """
        competition_ids = self.store.competition_ids()
        if not competition_ids:
            return None

        competition = self.store.get(self.rng.choice(competition_ids))
        roster_size = len(competition.traders)
        if roster_size == 0:
            return None

        count = max(1, min(MAX_TRADERS_PER_TICK, roster_size))
        draws = [
            (index, round2(self.rng.uniform(-MAX_SCORE_STEP, MAX_SCORE_STEP)))
            for index in self.rng.sample(range(roster_size), count)
        ]

        updates = self.store.apply_score_deltas(competition.id, draws)
        message = ScoreUpdateMessage(competitionId=competition.id, updates=updates)
        logger.debug(f"Updated {len(updates)} traders in {competition.id}")

        if self.hub is not None:
            self.hub.broadcast(message)
        return message
