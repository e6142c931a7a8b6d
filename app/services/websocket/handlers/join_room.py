"""Handler for JOIN_ROOM messages."""

import logging

from app.schemas.ws import JoinRoomPayload, MessageType

from . import handler
from .base import (
    HandlerContext,
    HandlerResult,
    error_response,
    roster_message,
    validate_payload,
    validate_request_id,
)
from .leave import leave_room_and_notify

logger = logging.getLogger(__name__)


@handler(MessageType.JOIN_ROOM)
async def handle_join_room(ctx: HandlerContext) -> HandlerResult:
    """Handle JOIN_ROOM message."""
    logger.info(
        "JOIN_ROOM request: connection=%s, user=%s, request_id=%s, payload=%s",
        ctx.connection_id,
        ctx.user_id[:8],
        ctx.message.request_id,
        ctx.message.payload,
    )

    # Validate request_id
    error = validate_request_id(ctx.message.request_id, MessageType.JOIN_ROOM_ERROR)
    if error:
        return error

    # Validate payload
    payload, error = validate_payload(
        ctx.message.payload,
        JoinRoomPayload,
        ctx.message.request_id,
        MessageType.JOIN_ROOM_ERROR,
    )
    if error:
        logger.warning(
            "Invalid join_room payload from connection %s",
            ctx.connection_id,
        )
        return error

    # Leave the current room unless it is the one being joined
    connection = ctx.manager.get_connection(ctx.connection_id)
    requested = payload.room_code.upper()
    if connection is not None and connection.room_code not in (None, requested):
        await leave_room_and_notify(ctx.services, ctx.manager, connection)

    result = await ctx.services.room_service.join_room(
        code=requested,
        user_id=ctx.user_id,
        name=ctx.user_name,
    )

    if not result.success or result.room is None or result.roster is None:
        logger.warning(
            "JOIN_ROOM_ERROR: error_code=%s, message=%s, user=%s, connection=%s",
            result.error_code,
            result.error_message,
            ctx.user_id[:8],
            ctx.connection_id,
        )
        return error_response(
            error_code=result.error_code or "INTERNAL_ERROR",
            message=result.error_message or "Unknown error",
            error_type=MessageType.JOIN_ROOM_ERROR,
            request_id=ctx.message.request_id,
        )

    # Subscribe connection to the room
    await ctx.manager.subscribe_to_room(ctx.connection_id, result.room.code)

    logger.info(
        "JOIN_ROOM_OK: code=%s, user=%s, connection=%s",
        result.room.code,
        ctx.user_id[:8],
        ctx.connection_id,
    )

    return HandlerResult(
        success=True,
        response=roster_message(result.roster, MessageType.JOIN_ROOM_OK, ctx.message.request_id),
        broadcast=roster_message(result.roster),
        room_id=result.room.code,
    )
