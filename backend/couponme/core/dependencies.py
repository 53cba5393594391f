from collections.abc import Awaitable, Callable
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from couponme.core.errors import Forbidden, Unauthorized
from couponme.core.security import decode_token
from couponme.db.session import get_session
from couponme.models.user import User, UserRole

bearer_scheme = HTTPBearer(auto_error=False)


async def _user_from_token(session: AsyncSession, token: str) -> User:
    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        raise Unauthorized("Invalid token")

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise Unauthorized("Invalid token payload")

    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise Unauthorized("User not found")
    return user


async def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Resolve the bearer token to a freshly loaded user, or fail with 401."""
    if credentials is None:
        raise Unauthorized("Not authenticated")
    return await _user_from_token(session, credentials.credentials)


get_current_user = require_auth


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> User | None:
    if credentials is None:
        return None
    try:
        return await _user_from_token(session, credentials.credentials)
    except Unauthorized:
        return None


def require_role(*roles: UserRole) -> Callable[..., Awaitable[User]]:
    """Dependency factory: authenticated user whose role is one of ``roles``, else 403."""
    allowed = frozenset(roles)

    async def dependency(user: User = Depends(require_auth)) -> User:
        if user.role not in allowed:
            raise Forbidden("Forbidden")
        return user

    return dependency


require_admin = require_role(UserRole.ADMIN)
require_business = require_role(UserRole.BUSINESS)
require_uploader = require_role(UserRole.BUSINESS, UserRole.ADMIN)
