"""REST endpoints for reading room state.

Room mutations happen over the WebSocket; these endpoints serve the
roster and the latest match snapshot, e.g. for a page reload.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from app.dependencies.auth import CurrentUser
from app.dependencies.services import AppServices
from app.schemas.game_engine import MatchSnapshot
from app.schemas.room import RoomRoster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("/{code}", response_model=RoomRoster)
async def get_room(code: str, current_user: CurrentUser, services: AppServices):
    """Get the roster of a room by its (case-insensitive) code.

    Raises:
        HTTPException 404: If the room does not exist.
    """
    logger.info("GET /rooms/%s - user: %s", code, current_user.id[:8])

    roster = services.room_service.get_roster(code)
    if roster is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Room not found",
        )
    return roster


@router.get("/{code}/match", response_model=MatchSnapshot)
async def get_match(code: str, current_user: CurrentUser, services: AppServices):
    """Get the latest match snapshot of a room.

    Raises:
        HTTPException 404: If the room does not exist or has no match yet.
    """
    logger.info("GET /rooms/%s/match - user: %s", code, current_user.id[:8])

    if code not in services.rooms:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Room not found",
        )

    snapshot = services.coordinator.get_snapshot(code)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Match has not started",
        )
    return snapshot
