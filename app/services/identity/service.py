"""Identity service: registration, login and session credentials."""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from app.config import Settings

from .store import UserRecord, UserStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class AuthResult:
    """Result of register, authenticate and verify operations."""

    success: bool
    token: str | None = None
    user_id: str | None = None
    name: str | None = None
    expires_at: datetime | None = None
    expired: bool = False
    error_code: str | None = None
    error_message: str | None = None


class IdentityService:
    """Issues and verifies session credentials for registered users.

    Credentials are HS256 JWTs carrying the user id (``sub``) and name.
    They expire after ``SESSION_TTL_HOURS``; expiry is the only
    invalidation mechanism.
    """

    def __init__(self, store: UserStore, settings: Settings, clock: Clock | None = None):
        self._store = store
        self._settings = settings
        self._clock = clock or utc_now

    def _issue(self, record: UserRecord) -> AuthResult:
        issued_at = self._clock()
        expires_at = issued_at + timedelta(hours=self._settings.SESSION_TTL_HOURS)
        token = jwt.encode(
            {
                "sub": record.user_id,
                "name": record.name,
                "iat": issued_at,
                "exp": expires_at,
            },
            self._settings.JWT_SECRET,
            algorithm=self._settings.JWT_ALGORITHM,
        )
        return AuthResult(
            success=True,
            token=token,
            user_id=record.user_id,
            name=record.name,
            expires_at=expires_at,
        )

    def register(self, name: str, secret: str) -> AuthResult:
        """Register a new user and return a session credential.

        Names are trimmed and unique case-insensitively.
        """
        name = (name or "").strip()
        secret = secret or ""

        if len(name) < self._settings.MIN_NAME_LENGTH:
            return AuthResult(
                success=False,
                error_code="NAME_TOO_SHORT",
                error_message=f"Name must be at least {self._settings.MIN_NAME_LENGTH} characters",
            )
        if len(secret) < self._settings.MIN_SECRET_LENGTH:
            return AuthResult(
                success=False,
                error_code="SECRET_TOO_SHORT",
                error_message=f"Password must be at least {self._settings.MIN_SECRET_LENGTH} characters",
            )
        if self._store.name_taken(name):
            logger.warning("Registration rejected: name taken")
            return AuthResult(
                success=False,
                error_code="NAME_TAKEN",
                error_message="Name already taken",
            )

        record = UserRecord(
            user_id=str(uuid.uuid4()),
            name=name,
            secret_hash=generate_password_hash(secret),
            created_at=self._clock(),
        )
        self._store.add(record)
        logger.info("User registered: user_id=%s", record.user_id[:8])
        return self._issue(record)

    def authenticate(self, name: str, secret: str) -> AuthResult:
        """Check a name/secret pair and return a fresh session credential."""
        record = self._store.get_by_name(name or "")
        if record is None:
            logger.warning("Login failed: user not found")
            return AuthResult(
                success=False,
                error_code="USER_NOT_FOUND",
                error_message="User not found",
            )
        if not check_password_hash(record.secret_hash, secret or ""):
            logger.warning("Login failed: wrong secret for user %s", record.user_id[:8])
            return AuthResult(
                success=False,
                error_code="WRONG_SECRET",
                error_message="Wrong password",
            )

        logger.info("User authenticated: user_id=%s", record.user_id[:8])
        return self._issue(record)

    def verify(self, token: str) -> AuthResult:
        """Resolve a session credential to its (user_id, name).

        An expired credential fails with ``expired=True`` so callers can
        prompt for a new login rather than report a generic error.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.JWT_SECRET,
                algorithms=[self._settings.JWT_ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Session verification failed: credential expired")
            return AuthResult(
                success=False,
                expired=True,
                error_code="INVALID_OR_EXPIRED_CREDENTIAL",
                error_message="Session expired",
            )
        except jwt.InvalidTokenError as e:
            logger.warning("Session verification failed: %s", e)
            return AuthResult(
                success=False,
                error_code="INVALID_OR_EXPIRED_CREDENTIAL",
                error_message="Invalid session credential",
            )

        record = self._store.get_by_id(payload["sub"])
        if record is None:
            logger.warning("Session verification failed: unknown user %s", str(payload["sub"])[:8])
            return AuthResult(
                success=False,
                error_code="INVALID_OR_EXPIRED_CREDENTIAL",
                error_message="Invalid session credential",
            )

        logger.debug("Session verified for user %s", record.user_id[:8])
        return AuthResult(
            success=True,
            token=token,
            user_id=record.user_id,
            name=record.name,
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
