"""Subscription and checkout schemas."""

from datetime import datetime

from pydantic import BaseModel, computed_field


class SubscriptionResponse(BaseModel):
    id: int
    subscription_id: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def active(self) -> bool:
        return self.status == "active"


class CurrentSubscriptionResponse(BaseModel):
    data: SubscriptionResponse | None = None


class CheckoutResponse(BaseModel):
    """Hosted checkout URL, or the customer portal URL when already subscribed."""

    url: str
