"""Explicitly owned service registries, built once per application."""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from app.services.game.coordinator import MatchCoordinator
from app.services.game.dice import DieSource
from app.services.identity import IdentityService, UserStore
from app.services.room.service import RoomService
from app.services.room.store import RoomStore
from app.services.websocket.manager import ConnectionManager

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the boundary layer needs, wired together."""

    settings: Settings
    users: UserStore
    identity: IdentityService
    rooms: RoomStore
    room_service: RoomService
    manager: ConnectionManager
    coordinator: MatchCoordinator


def build_services(settings: Settings, die: DieSource | None = None) -> Services:
    """Construct fresh, independent stores and services."""
    users = UserStore()
    rooms = RoomStore(chat_history_limit=settings.CHAT_HISTORY_LIMIT)
    manager = ConnectionManager(settings)
    services = Services(
        settings=settings,
        users=users,
        identity=IdentityService(users, settings),
        rooms=rooms,
        room_service=RoomService(rooms, settings),
        manager=manager,
        coordinator=MatchCoordinator(rooms, publisher=manager, die=die),
    )
    logger.debug("Services built")
    return services


def get_services(request: Request) -> Services:
    return request.app.state.services


AppServices = Annotated[Services, Depends(get_services)]
