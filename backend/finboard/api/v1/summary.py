"""Summary API route: the dashboard's overview numbers."""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.api.deps import get_current_user, get_db
from finboard.models.user import User
from finboard.schemas.summary import SummaryResponse
from finboard.services.summary_service import SummaryService

router = APIRouter()


@router.get("", response_model=SummaryResponse)
async def get_summary(
    date_from: date | None = None,
    date_to: date | None = None,
    account_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Income, expenses and remaining amount for the period, with the change
    against the previous period of equal length, top spending categories and
    a per-day series.

    Defaults to the last 30 days when no range is given.
    """
    service = SummaryService(db)
    return await service.get_summary(
        user=current_user,
        date_from=date_from,
        date_to=date_to,
        account_id=account_id,
    )
