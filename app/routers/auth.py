import logging

from fastapi import APIRouter, HTTPException, status

from app.dependencies.auth import CurrentUser
from app.dependencies.services import AppServices
from app.schemas.auth import AuthUser, LoginRequest, RegisterRequest, SessionResponse
from app.services.identity import AuthResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

ERROR_STATUS_MAP = {
    "NAME_TOO_SHORT": status.HTTP_400_BAD_REQUEST,
    "SECRET_TOO_SHORT": status.HTTP_400_BAD_REQUEST,
    "NAME_TAKEN": status.HTTP_409_CONFLICT,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "WRONG_SECRET": status.HTTP_401_UNAUTHORIZED,
}


def _to_session(result: AuthResult) -> SessionResponse:
    if not result.success:
        raise HTTPException(
            status_code=ERROR_STATUS_MAP.get(result.error_code, status.HTTP_400_BAD_REQUEST),
            detail=result.error_message or "Authentication failed",
        )
    return SessionResponse(
        token=result.token,
        user_id=result.user_id,
        name=result.name,
        expires_at=result.expires_at,
    )


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, services: AppServices):
    """Register a new user and return a session credential."""
    logger.info("POST /auth/register")
    return _to_session(services.identity.register(request.name, request.secret))


@router.post("/login", response_model=SessionResponse)
async def login(request: LoginRequest, services: AppServices):
    """Log in with name and secret and return a fresh session credential."""
    logger.info("POST /auth/login")
    return _to_session(services.identity.authenticate(request.name, request.secret))


@router.get("/me", response_model=AuthUser)
async def get_me(current_user: CurrentUser):
    """Get the current authenticated user."""
    logger.info("GET /auth/me - user: %s", current_user.id[:8])
    return current_user
