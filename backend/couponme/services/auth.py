import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from couponme.core import metrics, security
from couponme.core.errors import Conflict, Unauthorized
from couponme.models.user import User
from couponme.schemas.user import UserCreate

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User with this email already exists"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, user_in: UserCreate) -> User:
    existing = await get_user_by_email(session, user_in.email)
    if existing:
        raise Conflict(DUPLICATE_EMAIL)

    db_user = User(
        email=normalize_email(user_in.email),
        hashed_password=security.hash_password(user_in.password),
        name=user_in.name.strip(),
        role=user_in.role,
    )
    session.add(db_user)
    try:
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same address.
        await session.rollback()
        raise Conflict(DUPLICATE_EMAIL)
    await session.refresh(db_user)
    metrics.record_signup()
    logger.info("user_registered", extra={"user_id": str(db_user.id), "role": db_user.role.value})
    return db_user


async def authenticate_user(session: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(session, email)
    if not user or not security.verify_password(password, user.hashed_password):
        metrics.record_login_failure()
        raise Unauthorized("Invalid credentials")
    metrics.record_login_success()
    return user


def issue_tokens_for_user(user: User) -> dict[str, str]:
    return {
        "access_token": security.create_access_token(str(user.id), user.role.value, user.membership_expiry),
        "refresh_token": security.create_refresh_token(str(user.id)),
    }


async def user_from_refresh_token(session: AsyncSession, token: str) -> User:
    payload = security.decode_token(token)
    if not payload or payload.get("type") != "refresh":
        raise Unauthorized("Invalid refresh token")
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise Unauthorized("Invalid refresh token")
    user = await session.get(User, user_id)
    if user is None:
        raise Unauthorized("User not found")
    return user
