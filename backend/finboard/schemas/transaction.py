"""Transaction schemas for request/response validation."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class TransactionCreate(BaseModel):
    account_id: int
    category_id: int | None = None
    date: date_type
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    payee: str = Field(min_length=1, max_length=255)
    notes: str | None = None


class TransactionUpdate(BaseModel):
    account_id: int | None = None
    category_id: int | None = None
    date: date_type | None = None
    amount: Decimal | None = Field(None, max_digits=12, decimal_places=2)
    payee: str | None = Field(None, min_length=1, max_length=255)
    notes: str | None = None


class TransactionResponse(BaseModel):
    id: int
    account_id: int
    account_name: str | None = None
    category_id: int | None = None
    category_name: str | None = None
    date: date_type
    amount: Decimal
    payee: str
    notes: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ImportResult(BaseModel):
    account_id: int
    total_rows: int
    imported_count: int
