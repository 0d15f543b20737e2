"""Lemon Squeezy billing client.

Thin async wrapper over the provider's JSON:API endpoints: hosted checkout
creation and subscription lookup (for the customer portal link).
"""

import httpx
import structlog

from finboard.config import settings
from finboard.core.exceptions import BillingProviderError

logger = structlog.get_logger()

JSON_API = "application/vnd.api+json"


class LemonSqueezyClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.lemonsqueezy_api_key
        self.base_url = (base_url or settings.lemonsqueezy_api_url).rstrip("/")
        self.timeout = timeout or settings.lemonsqueezy_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Accept": JSON_API,
                "Content-Type": JSON_API,
                "Authorization": f"Bearer {self.api_key}",
            },
        )

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            async with self._client() as client:
                resp = await client.request(method, path, **kwargs)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "billing_request_failed",
                method=method,
                path=path,
                status=e.response.status_code,
                body=e.response.text[:500],
            )
            raise BillingProviderError(f"{method} {path} returned {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("billing_request_failed", method=method, path=path, error=str(e))
            raise BillingProviderError(f"{method} {path} failed: {e}") from e

    async def create_checkout(
        self,
        store_id: str,
        variant_id: str,
        custom_data: dict[str, str],
        redirect_url: str,
    ) -> str:
        """Create a hosted checkout and return its URL."""
        payload = {
            "data": {
                "type": "checkouts",
                "attributes": {
                    "checkout_data": {"custom": custom_data},
                    "product_options": {"redirect_url": redirect_url},
                },
                "relationships": {
                    "store": {"data": {"type": "stores", "id": str(store_id)}},
                    "variant": {"data": {"type": "variants", "id": str(variant_id)}},
                },
            }
        }
        body = await self._request("POST", "/checkouts", json=payload)
        url = (body.get("data") or {}).get("attributes", {}).get("url")
        if not url:
            raise BillingProviderError("Checkout URL is missing from provider response")
        logger.info("checkout_created", store_id=store_id, variant_id=variant_id)
        return url

    async def get_customer_portal_url(self, subscription_id: str) -> str:
        """Return the customer portal URL of an existing subscription."""
        body = await self._request("GET", f"/subscriptions/{subscription_id}")
        urls = (body.get("data") or {}).get("attributes", {}).get("urls") or {}
        portal_url = urls.get("customer_portal")
        if not portal_url:
            raise BillingProviderError("Customer portal URL is missing from provider response")
        return portal_url


def get_billing_client() -> LemonSqueezyClient:
    """FastAPI dependency (overridden in tests)."""
    return LemonSqueezyClient()
