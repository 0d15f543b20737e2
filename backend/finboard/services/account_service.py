"""Account management service."""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.exceptions import ForbiddenError, NotFoundError
from finboard.models.account import Account
from finboard.models.user import User
from finboard.schemas.account import AccountCreate, AccountUpdate

logger = structlog.get_logger()


class AccountService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_accounts(self, user: User) -> list[Account]:
        """List all accounts for a user."""
        result = await self.db.execute(
            select(Account)
            .where(Account.user_id == user.id)
            .order_by(Account.name, Account.id)
        )
        return list(result.scalars().all())

    async def create_account(self, data: AccountCreate, user: User) -> Account:
        """Create a new bank account."""
        account = Account(user_id=user.id, name=data.name)
        self.db.add(account)
        await self.db.flush()
        await self.db.refresh(account)
        return account

    async def get_account(self, account_id: int, user: User) -> Account:
        """Get a specific account, ensuring it belongs to the user."""
        return await self._get_user_account(account_id, user)

    async def update_account(self, account_id: int, data: AccountUpdate, user: User) -> Account:
        """Update an account."""
        account = await self._get_user_account(account_id, user)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(account, key, value)
        await self.db.flush()
        await self.db.refresh(account)
        return account

    async def delete_account(self, account_id: int, user: User) -> None:
        """Delete an account and, through the cascade, its transactions."""
        account = await self._get_user_account(account_id, user)
        await self.db.delete(account)
        await self.db.flush()

    async def bulk_delete_accounts(self, ids: list[int], user: User) -> list[int]:
        """Delete the user's accounts among ``ids``; ids owned by others are ignored."""
        result = await self.db.execute(
            select(Account.id).where(Account.id.in_(ids), Account.user_id == user.id)
        )
        owned_ids = sorted(result.scalars().all())
        if owned_ids:
            await self.db.execute(delete(Account).where(Account.id.in_(owned_ids)))
            await self.db.flush()
        logger.info("accounts_bulk_deleted", user_id=user.id, requested=len(ids), deleted=len(owned_ids))
        return owned_ids

    async def _get_user_account(self, account_id: int, user: User) -> Account:
        """Fetch account and verify ownership."""
        account = await self.db.get(Account, account_id)
        if not account:
            raise NotFoundError("Account")
        if account.user_id != user.id:
            raise ForbiddenError()
        return account
