import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.dependencies.services import AppServices
from app.schemas.auth import AuthUser

logger = logging.getLogger(__name__)


class SessionBearer(HTTPBearer):
    """Bearer scheme that verifies session credentials issued by the identity service."""

    def __init__(self, auto_error: bool = True):
        super().__init__(auto_error=auto_error)

    async def __call__(
        self,
        credentials: Annotated[
            HTTPAuthorizationCredentials | None,
            Depends(HTTPBearer(auto_error=False)),
        ],
        services: AppServices,
    ) -> AuthUser:
        if credentials is None:
            logger.warning("Authentication failed: missing authorization header")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing authorization header",
                headers={"WWW-Authenticate": "Bearer"},
            )

        result = services.identity.verify(credentials.credentials)
        if not result.success or result.user_id is None or result.name is None:
            detail = "Session expired" if result.expired else "Invalid session credential"
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=detail,
                headers={"WWW-Authenticate": "Bearer"},
            )

        logger.debug("Session validated for user: %s", result.user_id[:8])
        return AuthUser(id=result.user_id, name=result.name)


session_bearer = SessionBearer()

CurrentUser = Annotated[AuthUser, Depends(session_bearer)]
