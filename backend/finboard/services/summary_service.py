"""Summary service: dashboard totals, spending by category and daily activity."""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.models.account import Account
from finboard.models.category import Category
from finboard.models.transaction import Transaction
from finboard.models.user import User
from finboard.services.transaction_service import resolve_period

CENT = Decimal("0.01")
TOP_CATEGORIES = 3
OTHER_LABEL = "Other"
UNCATEGORIZED_LABEL = "Uncategorized"


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT)


def percentage_change(current: Decimal, previous: Decimal) -> float:
    """Relative change in percent; a rise from zero counts as 100%."""
    if previous == 0:
        return 0.0 if current == previous else 100.0
    return round(float((current - previous) / abs(previous) * 100), 2)


class SummaryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_filters(
        self,
        user: User,
        date_from: date,
        date_to: date,
        account_id: int | None,
    ) -> list:
        """Return a list of WHERE clauses (reusable)."""
        user_accounts = select(Account.id).where(Account.user_id == user.id)
        clauses = [
            Transaction.account_id.in_(user_accounts),
            Transaction.date >= date_from,
            Transaction.date <= date_to,
        ]
        if account_id:
            clauses.append(Transaction.account_id == account_id)
        return clauses

    async def get_summary(
        self,
        user: User,
        date_from: date | None = None,
        date_to: date | None = None,
        account_id: int | None = None,
    ) -> dict:
        date_from, date_to = resolve_period(date_from, date_to)

        # Previous window has the same length and ends right before this one
        period_length = timedelta(days=(date_to - date_from).days + 1)
        current = await self._totals(self._base_filters(user, date_from, date_to, account_id))
        previous = await self._totals(
            self._base_filters(user, date_from - period_length, date_to - period_length, account_id)
        )

        clauses = self._base_filters(user, date_from, date_to, account_id)
        return {
            "date_from": date_from,
            "date_to": date_to,
            "remaining_amount": current["remaining"],
            "remaining_change": percentage_change(current["remaining"], previous["remaining"]),
            "income_amount": current["income"],
            "income_change": percentage_change(current["income"], previous["income"]),
            "expenses_amount": current["expenses"],
            "expenses_change": percentage_change(current["expenses"], previous["expenses"]),
            "categories": await self._spending_by_category(clauses),
            "days": await self._daily_activity(clauses, date_from, date_to),
        }

    async def _totals(self, clauses: list) -> dict:
        query = select(
            func.sum(
                case((Transaction.amount > 0, Transaction.amount), else_=Decimal("0"))
            ).label("income"),
            func.sum(
                case((Transaction.amount < 0, Transaction.amount), else_=Decimal("0"))
            ).label("expenses"),
        ).where(*clauses)
        row = (await self.db.execute(query)).one()
        income = _money(row.income)
        expenses = abs(_money(row.expenses))
        return {"income": income, "expenses": expenses, "remaining": income - expenses}

    async def _spending_by_category(self, clauses: list) -> list[dict]:
        """Expenses per category, largest first; the tail is folded into "Other"."""
        query = (
            select(
                Category.name.label("name"),
                func.sum(func.abs(Transaction.amount)).label("value"),
            )
            .select_from(Transaction)
            .outerjoin(Category, Transaction.category_id == Category.id)
            .where(*clauses, Transaction.amount < 0)
            .group_by(Transaction.category_id, Category.name)
        )
        rows = (await self.db.execute(query)).all()

        entries = [
            {"name": row.name or UNCATEGORIZED_LABEL, "value": _money(row.value)}
            for row in rows
        ]
        entries.sort(key=lambda e: e["value"], reverse=True)

        top = entries[:TOP_CATEGORIES]
        rest = entries[TOP_CATEGORIES:]
        if rest:
            top.append({"name": OTHER_LABEL, "value": sum((e["value"] for e in rest), Decimal("0.00"))})
        return top

    async def _daily_activity(self, clauses: list, date_from: date, date_to: date) -> list[dict]:
        """Income and expenses per day, with zero entries for quiet days."""
        query = (
            select(
                Transaction.date.label("day"),
                func.sum(
                    case((Transaction.amount > 0, Transaction.amount), else_=Decimal("0"))
                ).label("income"),
                func.sum(
                    case((Transaction.amount < 0, Transaction.amount), else_=Decimal("0"))
                ).label("expenses"),
            )
            .where(*clauses)
            .group_by(Transaction.date)
        )
        rows = (await self.db.execute(query)).all()
        by_day = {row.day: row for row in rows}

        days = []
        current = date_from
        while current <= date_to:
            row = by_day.get(current)
            days.append({
                "date": current,
                "income": _money(row.income) if row else Decimal("0.00"),
                "expenses": abs(_money(row.expenses)) if row else Decimal("0.00"),
            })
            current += timedelta(days=1)
        return days
