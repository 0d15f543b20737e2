"""Transaction management service."""

from datetime import date, timedelta

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from finboard.models.account import Account
from finboard.models.category import Category
from finboard.models.transaction import Transaction
from finboard.models.user import User
from finboard.schemas.transaction import TransactionCreate, TransactionUpdate

logger = structlog.get_logger()

# Dashboard window used when the caller gives no explicit date range
DEFAULT_PERIOD_DAYS = 30


def resolve_period(date_from: date | None, date_to: date | None) -> tuple[date, date]:
    """Fill in a missing date range with the default trailing window ending today."""
    date_to = date_to or date.today()
    date_from = date_from or (date_to - timedelta(days=DEFAULT_PERIOD_DAYS))
    if date_from > date_to:
        raise ValidationError("date_from must not be after date_to")
    return date_from, date_to


class TransactionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _enriched_query(self, user: User):
        """Transactions of the user's accounts, joined with account and category names."""
        return (
            select(
                Transaction,
                Account.name.label("account_name"),
                Category.name.label("category_name"),
            )
            .join(Account, Transaction.account_id == Account.id)
            .outerjoin(Category, Transaction.category_id == Category.id)
            .where(Account.user_id == user.id)
        )

    async def list_transactions(
        self,
        user: User,
        date_from: date | None = None,
        date_to: date | None = None,
        account_id: int | None = None,
    ) -> list[dict]:
        """List transactions within a date range, newest first."""
        date_from, date_to = resolve_period(date_from, date_to)

        query = self._enriched_query(user).where(
            Transaction.date >= date_from,
            Transaction.date <= date_to,
        )
        if account_id:
            query = query.where(Transaction.account_id == account_id)
        query = query.order_by(Transaction.date.desc(), Transaction.id.desc())

        result = await self.db.execute(query)
        return [self._to_dict(row.Transaction, row.account_name, row.category_name) for row in result.all()]

    async def get_transaction(self, transaction_id: int, user: User) -> dict:
        """Get a specific transaction."""
        result = await self.db.execute(
            self._enriched_query(user).where(Transaction.id == transaction_id)
        )
        row = result.one_or_none()
        if row is None:
            # Distinguish "missing" from "someone else's"
            await self._get_user_transaction(transaction_id, user)
            raise NotFoundError("Transaction")
        return self._to_dict(row.Transaction, row.account_name, row.category_name)

    async def create_transaction(self, data: TransactionCreate, user: User) -> dict:
        """Create a transaction manually."""
        await self._verify_account_ownership(data.account_id, user)
        if data.category_id is not None:
            await self._verify_category_ownership(data.category_id, user)

        txn = Transaction(**data.model_dump())
        self.db.add(txn)
        await self.db.flush()
        return await self.get_transaction(txn.id, user)

    async def bulk_create_transactions(
        self, items: list[TransactionCreate], user: User
    ) -> list[dict]:
        """Insert several transactions at once after checking every referenced row."""
        for account_id in {item.account_id for item in items}:
            await self._verify_account_ownership(account_id, user)
        for category_id in {item.category_id for item in items if item.category_id is not None}:
            await self._verify_category_ownership(category_id, user)

        txns = [Transaction(**item.model_dump()) for item in items]
        self.db.add_all(txns)
        await self.db.flush()

        created_ids = [t.id for t in txns]
        result = await self.db.execute(
            self._enriched_query(user)
            .where(Transaction.id.in_(created_ids))
            .order_by(Transaction.id)
        )
        logger.info("transactions_bulk_created", user_id=user.id, count=len(txns))
        return [self._to_dict(row.Transaction, row.account_name, row.category_name) for row in result.all()]

    async def update_transaction(
        self,
        transaction_id: int,
        data: TransactionUpdate,
        user: User,
    ) -> dict:
        """Partially update a transaction; a category can be cleared with an explicit null."""
        txn = await self._get_user_transaction(transaction_id, user)
        update_data = data.model_dump(exclude_unset=True)

        # Required columns cannot be nulled out
        for key in ("account_id", "date", "amount", "payee"):
            if key in update_data and update_data[key] is None:
                update_data.pop(key)

        if "account_id" in update_data:
            await self._verify_account_ownership(update_data["account_id"], user)
        if update_data.get("category_id") is not None:
            await self._verify_category_ownership(update_data["category_id"], user)

        for key, value in update_data.items():
            setattr(txn, key, value)
        await self.db.flush()
        return await self.get_transaction(txn.id, user)

    async def delete_transaction(self, transaction_id: int, user: User) -> None:
        txn = await self._get_user_transaction(transaction_id, user)
        await self.db.delete(txn)
        await self.db.flush()

    async def bulk_delete_transactions(self, ids: list[int], user: User) -> list[int]:
        """Delete the user's transactions among ``ids``; ids owned by others are ignored."""
        user_accounts = select(Account.id).where(Account.user_id == user.id)
        result = await self.db.execute(
            select(Transaction.id).where(
                Transaction.id.in_(ids),
                Transaction.account_id.in_(user_accounts),
            )
        )
        owned_ids = sorted(result.scalars().all())
        if owned_ids:
            await self.db.execute(delete(Transaction).where(Transaction.id.in_(owned_ids)))
            await self.db.flush()
        logger.info("transactions_bulk_deleted", user_id=user.id, requested=len(ids), deleted=len(owned_ids))
        return owned_ids

    async def _get_user_transaction(self, transaction_id: int, user: User) -> Transaction:
        """Fetch transaction and verify ownership through account."""
        txn = await self.db.get(Transaction, transaction_id)
        if not txn:
            raise NotFoundError("Transaction")
        await self._verify_account_ownership(txn.account_id, user)
        return txn

    async def _verify_account_ownership(self, account_id: int, user: User) -> None:
        """Check that an account belongs to the user."""
        account = await self.db.get(Account, account_id)
        if not account:
            raise NotFoundError("Account")
        if account.user_id != user.id:
            raise ForbiddenError()

    async def _verify_category_ownership(self, category_id: int, user: User) -> None:
        category = await self.db.get(Category, category_id)
        if not category:
            raise NotFoundError("Category")
        if category.user_id != user.id:
            raise ForbiddenError()

    @staticmethod
    def _to_dict(txn: Transaction, account_name: str | None, category_name: str | None) -> dict:
        return {
            "id": txn.id,
            "account_id": txn.account_id,
            "account_name": account_name,
            "category_id": txn.category_id,
            "category_name": category_name,
            "date": txn.date,
            "amount": txn.amount,
            "payee": txn.payee,
            "notes": txn.notes,
            "created_at": txn.created_at,
        }
