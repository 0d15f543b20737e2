"""Account management API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.api.deps import get_current_user, get_db
from finboard.models.user import User
from finboard.schemas.account import AccountCreate, AccountResponse, AccountUpdate
from finboard.schemas.common import BulkDeleteRequest, BulkDeleteResult
from finboard.services.account_service import AccountService

router = APIRouter()


@router.get("", response_model=list[AccountResponse])
async def list_accounts(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List all accounts for current user."""
    service = AccountService(db)
    return await service.list_accounts(current_user)


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    data: AccountCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new bank account."""
    service = AccountService(db)
    return await service.create_account(data, current_user)


@router.post("/bulk-delete", response_model=BulkDeleteResult)
async def bulk_delete_accounts(
    data: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete several accounts (and their transactions) at once."""
    service = AccountService(db)
    deleted = await service.bulk_delete_accounts(data.ids, current_user)
    return BulkDeleteResult(deleted_ids=deleted)


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific account."""
    service = AccountService(db)
    return await service.get_account(account_id, current_user)


@router.patch("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    data: AccountUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update an account."""
    service = AccountService(db)
    return await service.update_account(account_id, data, current_user)


@router.delete("/{account_id}", status_code=204)
async def delete_account(
    account_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an account and its transactions."""
    service = AccountService(db)
    await service.delete_account(account_id, current_user)
