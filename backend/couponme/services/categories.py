import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core.errors import Conflict, NotFound
from couponme.models.category import Category
from couponme.models.coupon import Coupon
from couponme.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)

SLUG_TAKEN = "Category slug already exists"


async def list_categories(session: AsyncSession) -> list[Category]:
    result = await session.execute(select(Category).order_by(Category.name_en))
    return list(result.scalars())


async def get_category(session: AsyncSession, category_id: uuid.UUID) -> Category:
    category = await session.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


async def get_category_by_slug(session: AsyncSession, slug: str) -> Category | None:
    result = await session.execute(select(Category).where(Category.slug == slug))
    return result.scalar_one_or_none()


async def _ensure_slug_free(session: AsyncSession, slug: str, exclude_id: uuid.UUID | None = None) -> None:
    existing = await get_category_by_slug(session, slug)
    if existing and existing.id != exclude_id:
        raise Conflict(SLUG_TAKEN)


async def _commit_or_conflict(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict(SLUG_TAKEN)


async def create_category(session: AsyncSession, payload: CategoryCreate) -> Category:
    await _ensure_slug_free(session, payload.slug)
    category = Category(name_en=payload.name_en, name_el=payload.name_el, slug=payload.slug)
    session.add(category)
    await _commit_or_conflict(session)
    await session.refresh(category)
    logger.info("category_created", extra={"category_id": str(category.id), "slug": category.slug})
    return category


async def update_category(session: AsyncSession, category_id: uuid.UUID, payload: CategoryUpdate) -> Category:
    category = await get_category(session, category_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "slug" in data and data["slug"] != category.slug:
        await _ensure_slug_free(session, data["slug"], exclude_id=category.id)
    for field, value in data.items():
        setattr(category, field, value)
    session.add(category)
    await _commit_or_conflict(session)
    await session.refresh(category)
    return category


async def count_category_coupons(session: AsyncSession, category_id: uuid.UUID) -> int:
    result = await session.execute(select(func.count(Coupon.id)).where(Coupon.category_id == category_id))
    return int(result.scalar_one())


async def delete_category(session: AsyncSession, category_id: uuid.UUID) -> None:
    """Delete a category only while no coupon references it.

    The emptiness check and the delete are one statement, so a coupon created
    concurrently either blocks the delete or fails its own foreign key.
    """
    in_use = select(Coupon.id).where(Coupon.category_id == category_id).exists()
    result = await session.execute(
        delete(Category)
        .where(Category.id == category_id, ~in_use)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        await session.commit()
        logger.info("category_deleted", extra={"category_id": str(category_id)})
        return

    await session.rollback()
    await get_category(session, category_id)
    blocking = await count_category_coupons(session, category_id)
    raise Conflict(f"Cannot delete category with {blocking} coupons", meta={"count": blocking})
