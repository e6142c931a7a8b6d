from app.services.websocket.handlers import HandlerContext, HandlerResult, dispatch, handler
from app.services.websocket.manager import Connection, ConnectionManager

__all__ = [
    "Connection",
    "ConnectionManager",
    "HandlerContext",
    "HandlerResult",
    "dispatch",
    "handler",
]
