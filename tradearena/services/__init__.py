from .competition_store import CompetitionStore, schedule_competitions
from .broadcast_hub import BroadcastHub, ViewerChannel
from .score_mutator import ScoreMutator
from .scheduler import PeriodicTask

__all__ = [
    "CompetitionStore",
    "schedule_competitions",
    "BroadcastHub",
    "ViewerChannel",
    "ScoreMutator",
    "PeriodicTask",
]
