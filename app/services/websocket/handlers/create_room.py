"""Handler for CREATE_ROOM messages."""

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
from .leave import leave_room_and_notify

logger = logging.getLogger(__name__)


@handler(MessageType.CREATE_ROOM)
async def handle_create_room(ctx: HandlerContext) -> HandlerResult:
    """Handle CREATE_ROOM message.

    A connection belongs to at most one room, so any current room is left
    first. The creator becomes host and sole member of the new room.
    """
    logger.info(
        "CREATE_ROOM request: connection=%s, user=%s, request_id=%s",
        ctx.connection_id,
        ctx.user_id[:8],
        ctx.message.request_id,
    )

    # Validate request_id
    error = validate_request_id(ctx.message.request_id, MessageType.CREATE_ROOM_ERROR)
    if error:
        return error

    connection = ctx.manager.get_connection(ctx.connection_id)
    if connection is None:
        return error_response(
            error_code="INTERNAL_ERROR",
            message="Connection not registered",
            error_type=MessageType.CREATE_ROOM_ERROR,
            request_id=ctx.message.request_id,
        )
    await leave_room_and_notify(ctx.services, ctx.manager, connection)

    result = await ctx.services.room_service.create_room(ctx.user_id, ctx.user_name)
    if not result.success or result.room is None or result.roster is None:
        logger.warning(
            "CREATE_ROOM_ERROR: error_code=%s, message=%s, user=%s",
            result.error_code,
            result.error_message,
            ctx.user_id[:8],
        )
        return error_response(
            error_code=result.error_code or "INTERNAL_ERROR",
            message=result.error_message or "Unknown error",
            error_type=MessageType.CREATE_ROOM_ERROR,
            request_id=ctx.message.request_id,
        )

    # Subscribe connection to the room
    await ctx.manager.subscribe_to_room(ctx.connection_id, result.room.code)

    logger.info(
        "CREATE_ROOM_OK: code=%s, user=%s, connection=%s",
        result.room.code,
        ctx.user_id[:8],
        ctx.connection_id,
    )

    return HandlerResult(
        success=True,
        response=roster_message(
            result.roster, MessageType.CREATE_ROOM_OK, ctx.message.request_id
        ),
    )
