from datetime import datetime
from uuid import UUID

from pydantic import Field

from couponme.schemas.base import CamelModel

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CategoryCreate(CamelModel):
    name_en: str = Field(min_length=2, max_length=50)
    name_el: str = Field(min_length=2, max_length=50)
    slug: str = Field(min_length=2, max_length=50, pattern=SLUG_PATTERN)


class CategoryUpdate(CamelModel):
    name_en: str | None = Field(default=None, min_length=2, max_length=50)
    name_el: str | None = Field(default=None, min_length=2, max_length=50)
    slug: str | None = Field(default=None, min_length=2, max_length=50, pattern=SLUG_PATTERN)


class CategoryRead(CamelModel):
    id: UUID
    name_en: str
    name_el: str
    slug: str
    created_at: datetime
