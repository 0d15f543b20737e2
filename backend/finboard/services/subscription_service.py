"""Subscription service: checkout flow and billing webhook processing."""

import hashlib
import hmac
import json

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.config import settings
from finboard.core.exceptions import BillingProviderError, InternalError, UnauthorizedError
from finboard.models.subscription import Subscription
from finboard.models.user import User
from finboard.services.billing_client import LemonSqueezyClient

logger = structlog.get_logger()

# Events that carry the subscription's current status and trigger an upsert
UPSERT_EVENTS = frozenset({"subscription_created", "subscription_updated"})


def compute_signature(body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of the raw request body, as sent in the X-Signature header."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None, secret: str) -> bool:
    if not signature or not secret:
        return False
    expected = compute_signature(body, secret)
    return hmac.compare_digest(expected.encode(), signature.strip().encode())


class SubscriptionService:
    def __init__(self, db: AsyncSession, billing: LemonSqueezyClient | None = None):
        self.db = db
        self.billing = billing

    async def get_current(self, user: User) -> Subscription | None:
        result = await self.db.execute(
            select(Subscription)
            .where(Subscription.user_id == user.id)
            .order_by(Subscription.updated_at.desc(), Subscription.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def checkout(self, user: User) -> str:
        """Return where to send the user: portal if already subscribed, else a new checkout."""
        existing = await self.get_current(user)

        try:
            if existing and existing.subscription_id:
                url = await self.billing.get_customer_portal_url(existing.subscription_id)
                logger.info("portal_url_fetched", user_id=user.id, subscription_id=existing.subscription_id)
                return url

            return await self.billing.create_checkout(
                store_id=settings.lemonsqueezy_store_id,
                variant_id=settings.lemonsqueezy_variant_id,
                custom_data={"user_id": str(user.id)},
                redirect_url=f"{settings.app_public_url.rstrip('/')}/",
            )
        except BillingProviderError as e:
            logger.error("checkout_failed", user_id=user.id, error=str(e))
            raise InternalError() from e

    async def handle_webhook(self, body: bytes, signature: str | None) -> None:
        """Verify, parse and apply one webhook delivery.

        Only subscription creation/update events write; repeated deliveries
        simply overwrite the stored status (last write wins).
        """
        if not verify_signature(body, signature, settings.lemonsqueezy_webhook_secret):
            logger.warning("webhook_signature_rejected", has_signature=bool(signature))
            raise UnauthorizedError()

        try:
            payload = json.loads(body)
            event = payload["meta"]["event_name"]
            subscription_id = str(payload["data"]["id"])
            status = payload["data"]["attributes"]["status"]
            custom_data = payload["meta"].get("custom_data") or {}
        except (ValueError, KeyError, TypeError) as e:
            logger.error("webhook_payload_invalid", error=str(e))
            raise InternalError() from e

        if event not in UPSERT_EVENTS:
            logger.info("webhook_event_ignored", event_name=event, subscription_id=subscription_id)
            return

        result = await self.db.execute(
            select(Subscription).where(Subscription.subscription_id == subscription_id)
        )
        existing = result.scalar_one_or_none()

        if existing:
            existing.status = status
            await self.db.flush()
            logger.info("webhook_processed", event_name=event, subscription_id=subscription_id, status=status, action="updated")
            return

        user = await self._resolve_user(custom_data.get("user_id"))
        if user is None:
            logger.warning(
                "webhook_unknown_user",
                event_name=event,
                subscription_id=subscription_id,
                user_id=custom_data.get("user_id"),
            )
            return

        self.db.add(Subscription(user_id=user.id, subscription_id=subscription_id, status=status))
        await self.db.flush()
        logger.info("webhook_processed", event_name=event, subscription_id=subscription_id, status=status, action="created")

    async def _resolve_user(self, raw_user_id) -> User | None:
        try:
            user_id = int(raw_user_id)
        except (TypeError, ValueError):
            return None
        return await self.db.get(User, user_id)
