"""Category API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.api.deps import get_current_user, get_db
from finboard.models.user import User
from finboard.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from finboard.schemas.common import BulkDeleteRequest, BulkDeleteResult
from finboard.services.category_service import CategoryService

router = APIRouter()


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the current user's categories."""
    service = CategoryService(db)
    return await service.list_categories(current_user)


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CategoryService(db)
    return await service.create_category(data, current_user)


@router.post("/bulk-delete", response_model=BulkDeleteResult)
async def bulk_delete_categories(
    data: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete several categories; their transactions become uncategorized."""
    service = CategoryService(db)
    deleted = await service.bulk_delete_categories(data.ids, current_user)
    return BulkDeleteResult(deleted_ids=deleted)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CategoryService(db)
    return await service.get_category(category_id, current_user)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CategoryService(db)
    return await service.update_category(category_id, data, current_user)


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = CategoryService(db)
    await service.delete_category(category_id, current_user)
