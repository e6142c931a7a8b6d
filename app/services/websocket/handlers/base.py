"""Base types and helpers for WebSocket message handlers."""

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

from app.schemas.room import RoomRoster
from app.schemas.ws import (
    ErrorPayload,
    MessageType,
    WSClientMessage,
    WSServerMessage,
)

if TYPE_CHECKING:
    from app.dependencies.services import Services
    from app.services.websocket.manager import ConnectionManager


@dataclass
class HandlerContext:
    """Context passed to each message handler."""

    connection_id: str
    user_id: str
    user_name: str
    message: WSClientMessage
    manager: "ConnectionManager"
    services: "Services"

    @property
    def room_code(self) -> str | None:
        connection = self.manager.get_connection(self.connection_id)
        return connection.room_code if connection else None


@dataclass
class HandlerResult:
    """Result returned by message handlers.

    ``broadcast`` goes to the other connections of ``room_id``.
    """

    success: bool
    response: WSServerMessage | None = None
    broadcast: WSServerMessage | None = None
    room_id: str | None = None


def validate_request_id(request_id: str | None, error_type: MessageType) -> HandlerResult | None:
    """Validate that request_id exists and is a valid UUID.

    Args:
        request_id: The request_id to validate.
        error_type: The MessageType to use for error responses.

    Returns:
        HandlerResult with error if validation fails, None if valid.
    """
    if not request_id:
        return error_response("VALIDATION_ERROR", "request_id is required", error_type)

    try:
        uuid.UUID(request_id)
    except ValueError:
        return error_response(
            "VALIDATION_ERROR",
            "request_id must be a valid UUID",
            error_type,
            request_id,
        )

    return None


T = TypeVar("T", bound=BaseModel)


def validate_payload(
    payload: dict | None,
    schema: type[T],
    request_id: str | None,
    error_type: MessageType,
) -> tuple[T | None, HandlerResult | None]:
    """Validate payload against a Pydantic schema.

    Args:
        payload: The raw payload dict to validate.
        schema: The Pydantic model class to validate against.
        request_id: The request_id for error responses.
        error_type: The MessageType to use for error responses.

    Returns:
        Tuple of (validated_payload, error_result). One will be None.
    """
    try:
        validated = schema.model_validate(payload or {})
        return validated, None
    except ValidationError as e:
        return None, error_response("VALIDATION_ERROR", str(e), error_type, request_id)


def error_response(
    error_code: str,
    message: str,
    error_type: MessageType,
    request_id: str | None = None,
) -> HandlerResult:
    """Build an error HandlerResult."""
    return HandlerResult(
        success=False,
        response=WSServerMessage(
            type=error_type,
            request_id=request_id,
            payload=ErrorPayload(
                error_code=error_code,
                message=message,
            ).model_dump(),
        ),
    )


def roster_message(
    roster: RoomRoster,
    message_type: MessageType = MessageType.ROOM_UPDATED,
    request_id: str | None = None,
) -> WSServerMessage:
    """Wrap a room roster in a server message."""
    return WSServerMessage(
        type=message_type,
        request_id=request_id,
        payload=roster.model_dump(mode="json"),
    )
