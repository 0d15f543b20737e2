"""SQLAlchemy models."""

from finboard.models.account import Account
from finboard.models.base import Base
from finboard.models.category import Category
from finboard.models.subscription import Subscription
from finboard.models.transaction import Transaction
from finboard.models.user import User

__all__ = [
    "Base",
    "User",
    "Account",
    "Category",
    "Transaction",
    "Subscription",
]
