"""Bearer-token authentication for the HTTP layer.

Tokens are issued elsewhere; this module only verifies them. Claims used:
``sub`` (user id), ``role`` (``user`` or ``admin``) and an optional ``name``.
Subjects with a deactivated user profile are refused; subjects without a
profile are accepted.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.identity.user.user import User
from storefront.shared.errors import AccessDenied

ADMIN_ROLE = "admin"
USER_ROLE = "user"

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str = USER_ROLE
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> Principal:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise _unauthorized("Invalid or expired token") from None

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Token has no subject")
    return Principal(user_id=str(user_id), role=payload.get("role", USER_ROLE), name=payload.get("name"))


def ensure_active(principal: Principal) -> Principal:
    profile = current_domain.repository_for(User).for_user(principal.user_id)
    if profile is not None and not profile.is_active:
        raise _unauthorized("Account is deactivated")
    return principal


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal:
    if credentials is None:
        raise _unauthorized("No token provided")
    return ensure_active(decode_token(credentials.credentials))


async def require_admin(current_user: Annotated[Principal, Depends(get_current_user)]) -> Principal:
    if not current_user.is_admin:
        raise AccessDenied("Admin access required")
    return current_user


CurrentUser = Annotated[Principal, Depends(get_current_user)]
AdminUser = Annotated[Principal, Depends(require_admin)]


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal | None:
    """The caller when a valid token is sent; anonymous otherwise."""
    if credentials is None:
        return None
    try:
        return ensure_active(decode_token(credentials.credentials))
    except HTTPException:
        return None


OptionalUser = Annotated[Principal | None, Depends(get_optional_user)]
