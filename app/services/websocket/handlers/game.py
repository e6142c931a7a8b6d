"""Handler for GAME_ACTION messages."""

import logging

from app.schemas.ws import (
    GameActionPayload,
    MessageType,
)

from . import handler
from .base import (
    HandlerContext,
    HandlerResult,
    error_response,
    validate_payload,
)

logger = logging.getLogger(__name__)


@handler(MessageType.GAME_ACTION)
async def handle_game_action(ctx: HandlerContext) -> HandlerResult:
    """Handle GAME_ACTION message by passing the intent to the match coordinator.

    Flow:
    1. Validate the connection is in a room
    2. Validate payload
    3. Roll or move through the coordinator (which authorizes the intent,
       runs the engine, stores the new state and publishes it)
    4. Reply to the requester only on error; the die value reaches
       everyone through the published dice_rolled event

    Rejected intents change nothing and are reported to the requester only.
    """
    room_code = ctx.room_code
    if room_code is None:
        return error_response(
            error_code="NOT_IN_ROOM",
            message="You are not in a room",
            error_type=MessageType.GAME_ERROR,
            request_id=ctx.message.request_id,
        )

    payload, validation_error = validate_payload(
        ctx.message.payload,
        GameActionPayload,
        ctx.message.request_id,
        MessageType.GAME_ERROR,
    )
    if validation_error:
        return validation_error

    coordinator = ctx.services.coordinator
    if payload.action_type == "roll":
        result = await coordinator.roll_dice(room_code, ctx.user_id)
    else:
        if payload.token_id is None:
            return error_response(
                error_code="VALIDATION_ERROR",
                message="token_id is required for a move",
                error_type=MessageType.GAME_ERROR,
                request_id=ctx.message.request_id,
            )
        result = await coordinator.move_token(room_code, ctx.user_id, payload.token_id)

    if not result.success:
        logger.info(
            "Game action rejected for user %s in room %s: %s - %s",
            ctx.user_id[:8],
            room_code,
            result.error_code,
            result.error_message,
        )
        return error_response(
            error_code=result.error_code or "PROCESSING_ERROR",
            message=result.error_message or "Failed to process action",
            error_type=MessageType.GAME_ERROR,
            request_id=ctx.message.request_id,
        )

    logger.info(
        "Game action processed for user %s in room %s: %d events",
        ctx.user_id[:8],
        room_code,
        len(result.events),
    )

    return HandlerResult(success=True)
