import enum
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from couponme.db.base import Base, utcnow

if TYPE_CHECKING:
    from couponme.models.coupon import Coupon


class UserRole(str, enum.Enum):
    USER = "USER"
    BUSINESS = "BUSINESS"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role"), nullable=False, default=UserRole.USER, server_default=UserRole.USER.value
    )
    membership_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    coupons: Mapped[list["Coupon"]] = relationship(
        "Coupon", back_populates="business", cascade="all, delete-orphan"
    )

    @property
    def is_member(self) -> bool:
        return is_member(self)


def as_utc(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back naive.
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def is_member(user: User | None, now: datetime | None = None) -> bool:
    """A user is a paid member strictly before their membership expiry."""
    if user is None or user.membership_expiry is None:
        return False
    now = now or datetime.now(timezone.utc)
    return as_utc(user.membership_expiry) > now
