"""Handler for START_GAME messages."""

import logging

from app.schemas.ws import MessageType

from . import handler
from .base import (
    HandlerContext,
    HandlerResult,
    error_response,
    roster_message,
    validate_request_id,
)

logger = logging.getLogger(__name__)


@handler(MessageType.START_GAME)
async def handle_start_game(ctx: HandlerContext) -> HandlerResult:
    """Handle START_GAME message from the host to begin the match.

    Flow:
    1. Validate request_id and that the connection is in a room
    2. Start the match through the room service (host check, player
       count, colors in join order, fresh game state)
    3. Reply START_GAME_OK to the host and ROOM_UPDATED to the others
    4. Publish the opening events and snapshot to the whole room

    The replies are sent directly so they reach clients before the first
    game_state.
    """
    error = validate_request_id(ctx.message.request_id, MessageType.START_GAME_ERROR)
    if error:
        return error

    room_code = ctx.room_code
    if room_code is None:
        return error_response(
            error_code="NOT_IN_ROOM",
            message="You are not in a room",
            error_type=MessageType.START_GAME_ERROR,
            request_id=ctx.message.request_id,
        )

    result = await ctx.services.room_service.start_match(room_code, ctx.user_id)
    if not result.success or result.roster is None:
        logger.warning(
            "START_GAME_ERROR: room=%s, user=%s, error_code=%s",
            room_code,
            ctx.user_id[:8],
            result.error_code,
        )
        return error_response(
            error_code=result.error_code or "INTERNAL_ERROR",
            message=result.error_message or "Failed to start game",
            error_type=MessageType.START_GAME_ERROR,
            request_id=ctx.message.request_id,
        )

    await ctx.manager.send_to_connection(
        ctx.connection_id,
        roster_message(result.roster, MessageType.START_GAME_OK, ctx.message.request_id),
    )
    await ctx.manager.send_to_room(
        room_code,
        roster_message(result.roster),
        exclude_connection=ctx.connection_id,
    )

    await ctx.services.coordinator.announce_start(room_code, result.events)

    logger.info(
        "Game started for room %s by host %s: %d players",
        room_code,
        ctx.user_id[:8],
        len(result.roster.members),
    )
    return HandlerResult(success=True)
