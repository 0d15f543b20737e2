"""Summary (dashboard analytics) schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class CategorySpending(BaseModel):
    name: str
    value: Decimal


class DailyActivity(BaseModel):
    date: date
    income: Decimal
    expenses: Decimal


class SummaryResponse(BaseModel):
    date_from: date
    date_to: date
    remaining_amount: Decimal
    remaining_change: float
    income_amount: Decimal
    income_change: float
    expenses_amount: Decimal
    expenses_change: float
    categories: list[CategorySpending]
    days: list[DailyActivity]
