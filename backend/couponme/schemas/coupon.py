from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, field_validator

from couponme.models.coupon import CouponStatus
from couponme.schemas.base import CamelModel, utc_aware
from couponme.schemas.category import CategoryRead
from couponme.schemas.user import UserSummary


class CouponCreate(CamelModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10)
    code: str = Field(min_length=3, max_length=50)
    category_id: UUID
    discount_percentage: int = Field(ge=1, le=100, strict=True)
    expiration_date: datetime
    image_path: str | None = Field(default=None, max_length=500)

    @field_validator("expiration_date")
    @classmethod
    def _expiration_aware(cls, value: datetime | None) -> datetime | None:
        return utc_aware(value)


class CouponUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, min_length=10)
    code: str | None = Field(default=None, min_length=3, max_length=50)
    category_id: UUID | None = None
    discount_percentage: int | None = Field(default=None, ge=1, le=100, strict=True)
    expiration_date: datetime | None = None
    image_path: str | None = Field(default=None, max_length=500)
    status: CouponStatus | None = None

    @field_validator("expiration_date")
    @classmethod
    def _expiration_aware(cls, value: datetime | None) -> datetime | None:
        return utc_aware(value)


class CouponDecision(CamelModel):
    status: Literal["APPROVED", "REJECTED"]


class CouponRead(CamelModel):
    id: UUID
    title: str
    description: str
    code: str | None
    code_locked: bool = False
    discount_percentage: int
    expiration_date: datetime
    image_path: str | None = None
    status: CouponStatus
    business_id: UUID
    category_id: UUID
    business: UserSummary
    category: CategoryRead
    created_at: datetime
    updated_at: datetime


class CouponDeleted(CamelModel):
    message: str
    id: UUID
