"""Handler for LEAVE_ROOM messages, and the shared leave flow used on disconnect."""

import logging
from typing import TYPE_CHECKING

from app.schemas.ws import MessageType, WSServerMessage
from app.services.room.service import LeaveRoomResult

from . import handler
from .base import HandlerContext, HandlerResult, error_response, roster_message

if TYPE_CHECKING:
    from app.dependencies.services import Services
    from app.services.websocket.manager import Connection, ConnectionManager

logger = logging.getLogger(__name__)


async def leave_room_and_notify(
    services: "Services",
    manager: "ConnectionManager",
    connection: "Connection",
) -> LeaveRoomResult | None:
    """Remove the connection's user from its room and tell the remaining members.

    Remaining members receive the system chat line and the updated roster.
    Returns None when the connection is not in a room.
    """
    room_code = connection.room_code
    if room_code is None:
        return None

    result = await services.room_service.leave_room(room_code, connection.user_id)
    await manager.unsubscribe_from_room(connection.connection_id)
    connection.room_code = None

    if not result.success:
        logger.debug(
            "Leave of room %s by %s failed: %s",
            room_code,
            connection.user_id[:8],
            result.error_code,
        )
        return result

    if result.system_message is not None:
        await manager.send_to_room(
            room_code,
            WSServerMessage(
                type=MessageType.CHAT_MESSAGE,
                payload=result.system_message.model_dump(mode="json"),
            ),
        )
    if result.roster is not None:
        await manager.send_to_room(room_code, roster_message(result.roster))

    return result


@handler(MessageType.LEAVE_ROOM)
async def handle_leave_room(ctx: HandlerContext) -> HandlerResult:
    """Handle LEAVE_ROOM message.

    The room is destroyed when its last member leaves; otherwise the
    remaining members get the updated roster (with a new host if needed).
    """
    connection = ctx.manager.get_connection(ctx.connection_id)
    if connection is None or connection.room_code is None:
        return error_response(
            error_code="NOT_IN_ROOM",
            message="You are not in a room",
            error_type=MessageType.LEAVE_ROOM_ERROR,
            request_id=ctx.message.request_id,
        )

    room_code = connection.room_code
    result = await leave_room_and_notify(ctx.services, ctx.manager, connection)

    if result is None or not result.success:
        return error_response(
            error_code=(result.error_code if result else None) or "NOT_IN_ROOM",
            message=(result.error_message if result else None) or "Failed to leave room",
            error_type=MessageType.LEAVE_ROOM_ERROR,
            request_id=ctx.message.request_id,
        )

    logger.info(
        "LEAVE_ROOM_OK: room=%s, user=%s, room_deleted=%s",
        room_code,
        ctx.user_id[:8],
        result.room_deleted,
    )
    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.LEAVE_ROOM_OK,
            request_id=ctx.message.request_id,
            payload={"room_code": room_code, "room_deleted": result.room_deleted},
        ),
    )
