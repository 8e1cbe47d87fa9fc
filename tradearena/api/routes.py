"""API routes for competitions and the live leaderboard feed."""

import logging

from fastapi import APIRouter, Depends, Path, WebSocket, WebSocketDisconnect

from tradearena.models import (
    CompetitionList,
    JoinRequest,
    JoinResponse,
    JoinedCompetitions,
    JoinedCompetitionsRequest,
    Leaderboard,
)
from tradearena.services import BroadcastHub, CompetitionStore
from .dependencies import get_hub, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")
feed_router = APIRouter()


@router.get("/competitions", response_model=CompetitionList)
async def list_competitions(
    store: CompetitionStore = Depends(get_store),
) -> CompetitionList:
    """
    List competitions with their schedule and participant counts.
    
    Returns: id, name, entryFee, prizePool, participants, startAt, endAt, status
    """
    return CompetitionList(competitions=store.list_competitions())


@router.post("/join", response_model=JoinResponse)
async def join_competition(
    body: JoinRequest,
    store: CompetitionStore = Depends(get_store),
) -> JoinResponse:
    """
    Join a competition. Joining again is a no-op.
    
    Returns: success, participants
    """
    participants = await store.join(body.competitionId, body.username)
    return JoinResponse(success=True, participants=participants)


@router.post("/my-competitions", response_model=JoinedCompetitions)
async def joined_competitions(
    body: JoinedCompetitionsRequest,
    store: CompetitionStore = Depends(get_store),
) -> JoinedCompetitions:
    """Ids of the competitions the user has already joined."""
    return JoinedCompetitions(competitionIds=store.joined_competition_ids(body.username))


@router.get("/competitions/{competition_id}/leaderboard", response_model=Leaderboard)
async def get_leaderboard(
    competition_id: str = Path(..., description="Competition id", example="comp-1"),
    store: CompetitionStore = Depends(get_store),
) -> Leaderboard:
    """
    Get a competition's traders ranked by score.
    
    Returns: id, name, traders (score descending, ties by name)
    """
    return store.leaderboard(competition_id)


@feed_router.websocket("/ws")
async def leaderboard_feed(
    websocket: WebSocket,
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Live leaderboard feed.
    
    Sends one snapshot per competition on connect, then every
    score_update. Frames sent by the viewer are ignored.
    """
    channel = await hub.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(channel)
