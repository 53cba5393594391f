from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from couponme.models.user import UserRole
from couponme.schemas.base import CamelModel, utc_aware


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=2, max_length=255)
    role: UserRole = UserRole.USER

    @field_validator("role")
    @classmethod
    def _no_self_service_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("role must be USER or BUSINESS")
        return value


class UserSummary(CamelModel):
    id: UUID
    name: str
    email: str


class UserRead(CamelModel):
    id: UUID
    email: str
    name: str
    role: UserRole
    membership_expiry: datetime | None = None
    is_member: bool = False
    created_at: datetime


class UserAdminRead(UserRead):
    coupon_count: int = 0


class UserAdminUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=255)
    role: UserRole | None = None
    membership_expiry: datetime | None = None

    @field_validator("membership_expiry")
    @classmethod
    def _membership_expiry_utc(cls, value: datetime | None) -> datetime | None:
        return utc_aware(value)
