from .service import AuthResult, IdentityService
from .store import UserRecord, UserStore

__all__ = ["AuthResult", "IdentityService", "UserRecord", "UserStore"]
