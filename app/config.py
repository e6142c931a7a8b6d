import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Session credentials
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    SESSION_TTL_HOURS: int = 12

    # Identity rules
    MIN_NAME_LENGTH: int = 3
    MIN_SECRET_LENGTH: int = 4

    # App config
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEBUG: bool = False

    # WebSocket config
    WS_HEARTBEAT_INTERVAL: int = 30
    WS_CONNECTION_TIMEOUT: int = 120
    WS_MAX_MESSAGE_SIZE: int = 64 * 1024
    WS_MAX_MESSAGES_PER_SECOND: int = 10

    # Match pacing (0 resolves forced forfeits immediately)
    TURN_TRANSITION_DELAY_MS: int = 800

    # Room chat
    CHAT_HISTORY_LIMIT: int = 100
    CHAT_ROSTER_TAIL: int = 50
    CHAT_MESSAGE_MAX_LENGTH: int = 200

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_SECRET cannot be empty")
        return v

    @field_validator("TURN_TRANSITION_DELAY_MS")
    @classmethod
    def validate_transition_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError("TURN_TRANSITION_DELAY_MS cannot be negative")
        return v

    @field_validator("CHAT_ROSTER_TAIL")
    @classmethod
    def validate_roster_tail(cls, v: int) -> int:
        if v < 1:
            raise ValueError("CHAT_ROSTER_TAIL must be positive")
        return v


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug(
        "Session TTL: %dh, transition delay: %dms",
        settings.SESSION_TTL_HOURS,
        settings.TURN_TRANSITION_DELAY_MS,
    )
    return settings
