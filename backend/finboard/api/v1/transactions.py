"""Transaction API routes."""

from datetime import date

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.api.deps import get_current_user, get_db
from finboard.config import settings
from finboard.core.exceptions import ValidationError
from finboard.models.user import User
from finboard.schemas.common import BulkDeleteRequest, BulkDeleteResult
from finboard.schemas.transaction import (
    ImportResult,
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)
from finboard.services.import_service import ImportService
from finboard.services.transaction_service import TransactionService
from finboard.utils.csv_parser import ColumnMapping

router = APIRouter()


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(
    date_from: date | None = None,
    date_to: date | None = None,
    account_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List transactions, newest first. Defaults to the last 30 days."""
    service = TransactionService(db)
    return await service.list_transactions(
        user=current_user,
        date_from=date_from,
        date_to=date_to,
        account_id=account_id,
    )


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a transaction manually."""
    service = TransactionService(db)
    return await service.create_transaction(data, current_user)


@router.post("/bulk-create", response_model=list[TransactionResponse], status_code=201)
async def bulk_create_transactions(
    data: list[TransactionCreate] = Body(..., min_length=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create many transactions at once (rows already mapped client-side)."""
    service = TransactionService(db)
    return await service.bulk_create_transactions(data, current_user)


@router.post("/bulk-delete", response_model=BulkDeleteResult)
async def bulk_delete_transactions(
    data: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = TransactionService(db)
    deleted = await service.bulk_delete_transactions(data.ids, current_user)
    return BulkDeleteResult(deleted_ids=deleted)


# ── Import ──────────────────────────────────────────────


@router.post("/import", response_model=ImportResult, status_code=201)
async def import_transactions(
    account_id: int = Query(..., description="Destination account picked by the user"),
    date_column: str | None = Query(None, description="Header of the date column (auto-detected if omitted)"),
    amount_column: str | None = Query(None, description="Header of the amount column"),
    payee_column: str | None = Query(None, description="Header of the payee column"),
    notes_column: str | None = Query(None, description="Header of the notes column"),
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Import all rows of a CSV file into one account.

    Columns are matched by common header names unless set explicitly.
    A file with any malformed row is rejected as a whole.
    """
    content = await file.read()
    if len(content) > settings.max_upload_size_mb * 1024 * 1024:
        raise ValidationError(f"File exceeds {settings.max_upload_size_mb} MB")

    mapping = ColumnMapping(
        date=date_column,
        amount=amount_column,
        payee=payee_column,
        notes=notes_column,
    )
    service = ImportService(db)
    return await service.import_csv(
        user=current_user,
        account_id=account_id,
        filename=file.filename or "upload.csv",
        content=content,
        mapping=mapping,
    )


# ── Single transaction CRUD ─────────────────────────────


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific transaction."""
    service = TransactionService(db)
    return await service.get_transaction(transaction_id, current_user)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    data: TransactionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a transaction (any of account, category, date, amount, payee, notes)."""
    service = TransactionService(db)
    return await service.update_transaction(transaction_id, data, current_user)


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = TransactionService(db)
    await service.delete_transaction(transaction_id, current_user)
