"""Messages pushed to viewers over the leaderboard feed."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, ConfigDict, TypeAdapter

from .leaderboard import Trader


class SnapshotMessage(BaseModel):
    """Complete current roster of one competition."""
    model_config = ConfigDict(populate_by_name=True)
    
    type: Literal["snapshot"] = "snapshot"
    competitionId: str
    traders: list[Trader]


class ScoreUpdateMessage(BaseModel):
    """
    New absolute scores for some traders of one competition.
    
    Despite the name these are not differences: each entry replaces
    the trader's score.
    """
    model_config = ConfigDict(populate_by_name=True)
    
    type: Literal["score_update"] = "score_update"
    competitionId: str
    updates: list[Trader]


LeaderboardMessage = Annotated[
    Union[SnapshotMessage, ScoreUpdateMessage],
    Field(discriminator="type"),
]

_message_adapter = TypeAdapter(LeaderboardMessage)


def parse_message(raw: Union[str, bytes]) -> Union[SnapshotMessage, ScoreUpdateMessage]:
    """
    Decode a JSON feed frame.
    
    Raises:
        pydantic.ValidationError: If the frame is not a known message
    """
    return _message_adapter.validate_json(raw)
