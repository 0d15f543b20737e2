"""Category management service."""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.exceptions import ForbiddenError, NotFoundError
from finboard.models.category import Category
from finboard.models.user import User
from finboard.schemas.category import CategoryCreate, CategoryUpdate

logger = structlog.get_logger()


class CategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_categories(self, user: User) -> list[Category]:
        """List the user's categories by name."""
        result = await self.db.execute(
            select(Category)
            .where(Category.user_id == user.id)
            .order_by(Category.name, Category.id)
        )
        return list(result.scalars().all())

    async def create_category(self, data: CategoryCreate, user: User) -> Category:
        category = Category(user_id=user.id, name=data.name)
        self.db.add(category)
        await self.db.flush()
        await self.db.refresh(category)
        return category

    async def get_category(self, category_id: int, user: User) -> Category:
        return await self._get_user_category(category_id, user)

    async def update_category(
        self, category_id: int, data: CategoryUpdate, user: User
    ) -> Category:
        category = await self._get_user_category(category_id, user)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(category, key, value)
        await self.db.flush()
        await self.db.refresh(category)
        return category

    async def delete_category(self, category_id: int, user: User) -> None:
        """Delete a category. Its transactions become uncategorized."""
        category = await self._get_user_category(category_id, user)
        await self.db.delete(category)
        await self.db.flush()

    async def bulk_delete_categories(self, ids: list[int], user: User) -> list[int]:
        """Delete the user's categories among ``ids``; ids owned by others are ignored."""
        result = await self.db.execute(
            select(Category.id).where(Category.id.in_(ids), Category.user_id == user.id)
        )
        owned_ids = sorted(result.scalars().all())
        if owned_ids:
            await self.db.execute(delete(Category).where(Category.id.in_(owned_ids)))
            await self.db.flush()
        logger.info("categories_bulk_deleted", user_id=user.id, requested=len(ids), deleted=len(owned_ids))
        return owned_ids

    async def _get_user_category(self, category_id: int, user: User) -> Category:
        """Fetch a category and verify it belongs to the user."""
        category = await self.db.get(Category, category_id)
        if not category:
            raise NotFoundError("Category")
        if category.user_id != user.id:
            raise ForbiddenError()
        return category
