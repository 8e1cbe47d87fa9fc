from .leaderboard import Trader, Leaderboard, rank_traders, ranking_key
from .competition import (
    Competition,
    CompetitionStatus,
    CompetitionSummary,
    CompetitionList,
    JoinRequest,
    JoinResponse,
    JoinedCompetitionsRequest,
    JoinedCompetitions,
)
from .messages import (
    SnapshotMessage,
    ScoreUpdateMessage,
    LeaderboardMessage,
    parse_message,
)

__all__ = [
    "Trader",
    "Leaderboard",
    "rank_traders",
    "ranking_key",
    "Competition",
    "CompetitionStatus",
    "CompetitionSummary",
    "CompetitionList",
    "JoinRequest",
    "JoinResponse",
    "JoinedCompetitionsRequest",
    "JoinedCompetitions",
    "SnapshotMessage",
    "ScoreUpdateMessage",
    "LeaderboardMessage",
    "parse_message",
]
