"""Bearer JWT authentication and role checks."""
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ..config import get_settings
from ..logging import get_logger

settings = get_settings()
logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class Caller:
    """The authenticated account making a request."""

    def __init__(self, id: str, role: str):
        self.id = id
        self.role = role

    @property
    def is_admin(self) -> bool:
        return self.role == settings.admin_role

    def __repr__(self) -> str:
        return f"Caller(id={self.id!r}, role={self.role!r})"


def verify_jwt(token: str) -> Optional[Caller]:
    """Decode a bearer token into a Caller, or None if it is not acceptable."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError:
        return None

    if settings.jwt_issuer and payload.get("iss") != settings.jwt_issuer:
        return None

    subject = payload.get("sub")
    if not subject:
        return None

    role = payload.get(settings.jwt_role_claim) or "user"
    return Caller(id=str(subject), role=str(role))


async def get_current_caller(
    bearer: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Caller:
    """
    Dependency that authenticates the caller from the Authorization header.
    Raises 401 when the token is missing or invalid.
    """
    caller = None
    if bearer and bearer.credentials:
        caller = verify_jwt(bearer.credentials)

    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to access this route",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


def require_roles(*roles: str):
    """Build a dependency that admits only callers holding one of ``roles``."""
    allowed = set(roles)

    async def dependency(caller: Caller = Depends(get_current_caller)) -> Caller:
        if caller.role not in allowed:
            logger.warning("role_rejected", caller_id=caller.id, role=caller.role)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {caller.role} is not authorized to access this route",
            )
        return caller

    return dependency


def require_publisher():
    """Dependency for bootcamp mutations."""
    return require_roles(*settings.publisher_roles)
