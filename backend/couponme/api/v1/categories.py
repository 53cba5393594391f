from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core.dependencies import require_admin
from couponme.db.session import get_session
from couponme.schemas.admin import MessageResponse
from couponme.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from couponme.services import categories as category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryRead])
async def list_categories(session: AsyncSession = Depends(get_session)) -> list[CategoryRead]:
    categories = await category_service.list_categories(session)
    return [CategoryRead.model_validate(category) for category in categories]


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_category(payload: CategoryCreate, session: AsyncSession = Depends(get_session)) -> CategoryRead:
    category = await category_service.create_category(session, payload)
    return CategoryRead.model_validate(category)


@router.patch("/{category_id}", response_model=CategoryRead, dependencies=[Depends(require_admin)])
async def update_category(
    category_id: UUID,
    payload: CategoryUpdate,
    session: AsyncSession = Depends(get_session),
) -> CategoryRead:
    category = await category_service.update_category(session, category_id, payload)
    return CategoryRead.model_validate(category)


@router.delete("/{category_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_category(category_id: UUID, session: AsyncSession = Depends(get_session)) -> MessageResponse:
    await category_service.delete_category(session, category_id)
    return MessageResponse(message="Category deleted successfully")
