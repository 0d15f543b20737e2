"""Subscription API routes: current plan, checkout and billing webhook."""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.api.deps import get_billing_client, get_current_user, get_db
from finboard.models.user import User
from finboard.schemas.subscription import (
    CheckoutResponse,
    CurrentSubscriptionResponse,
    SubscriptionResponse,
)
from finboard.services.billing_client import LemonSqueezyClient
from finboard.services.subscription_service import SubscriptionService

router = APIRouter()


@router.get("/current", response_model=CurrentSubscriptionResponse)
async def get_current_subscription(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Return the user's subscription, or ``data: null`` if they never subscribed."""
    service = SubscriptionService(db)
    subscription = await service.get_current(current_user)
    return CurrentSubscriptionResponse(
        data=SubscriptionResponse.model_validate(subscription) if subscription else None
    )


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    billing: LemonSqueezyClient = Depends(get_billing_client),
):
    """Start a premium checkout, or open the customer portal for existing subscribers."""
    service = SubscriptionService(db, billing)
    return CheckoutResponse(url=await service.checkout(current_user))


@router.post("/webhook")
async def billing_webhook(
    request: Request,
    x_signature: str | None = Header(None, alias="X-Signature"),
    db: AsyncSession = Depends(get_db),
):
    """Receive signed subscription events from the billing provider."""
    body = await request.body()
    service = SubscriptionService(db)
    await service.handle_webhook(body, x_signature)
    return {}
