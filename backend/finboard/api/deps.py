"""Shared API dependencies."""

from finboard.core.database import get_db
from finboard.core.security import get_current_user
from finboard.services.billing_client import get_billing_client

__all__ = ["get_db", "get_current_user", "get_billing_client"]
