"""In-memory user registry."""

import logging
from dataclasses import dataclass
from datetime import datetime

logger = logging.getLogger(__name__)


@dataclass
class UserRecord:
    """A registered user. Only the salted hash of the secret is kept."""

    user_id: str
    name: str
    secret_hash: str
    created_at: datetime


class UserStore:
    """Users keyed by id, with a case-insensitive name index."""

    def __init__(self) -> None:
        self._by_id: dict[str, UserRecord] = {}
        self._id_by_name: dict[str, str] = {}

    @staticmethod
    def _name_key(name: str) -> str:
        return name.strip().lower()

    def __len__(self) -> int:
        return len(self._by_id)

    def name_taken(self, name: str) -> bool:
        return self._name_key(name) in self._id_by_name

    def get_by_id(self, user_id: str) -> UserRecord | None:
        return self._by_id.get(user_id)

    def get_by_name(self, name: str) -> UserRecord | None:
        user_id = self._id_by_name.get(self._name_key(name))
        if user_id is None:
            return None
        return self._by_id.get(user_id)

    def add(self, record: UserRecord) -> None:
        key = self._name_key(record.name)
        if key in self._id_by_name:
            raise ValueError(f"Name already registered: {record.name}")
        self._by_id[record.user_id] = record
        self._id_by_name[key] = record.user_id
        logger.debug("User stored: user_id=%s", record.user_id[:8])

    def clear(self) -> None:
        self._by_id.clear()
        self._id_by_name.clear()
