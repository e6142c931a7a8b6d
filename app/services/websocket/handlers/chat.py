"""Handler for CHAT_SEND messages."""

import logging

from app.schemas.ws import ChatSendPayload, MessageType, WSServerMessage

from . import handler
from .base import HandlerContext, HandlerResult, error_response, validate_payload

logger = logging.getLogger(__name__)


@handler(MessageType.CHAT_SEND)
async def handle_chat_send(ctx: HandlerContext) -> HandlerResult:
    """Append a chat line to the room transcript and broadcast it to every member."""
    room_code = ctx.room_code
    if room_code is None:
        return error_response(
            error_code="NOT_IN_ROOM",
            message="You are not in a room",
            error_type=MessageType.CHAT_ERROR,
            request_id=ctx.message.request_id,
        )

    payload, error = validate_payload(
        ctx.message.payload,
        ChatSendPayload,
        ctx.message.request_id,
        MessageType.CHAT_ERROR,
    )
    if error:
        return error

    result = await ctx.services.room_service.send_chat(room_code, ctx.user_id, payload.message)
    if not result.success or result.message is None:
        return error_response(
            error_code=result.error_code or "INTERNAL_ERROR",
            message=result.error_message or "Failed to send message",
            error_type=MessageType.CHAT_ERROR,
            request_id=ctx.message.request_id,
        )

    chat = result.message.model_dump(mode="json")
    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.CHAT_MESSAGE,
            request_id=ctx.message.request_id,
            payload=chat,
        ),
        broadcast=WSServerMessage(type=MessageType.CHAT_MESSAGE, payload=chat),
        room_id=room_code,
    )
