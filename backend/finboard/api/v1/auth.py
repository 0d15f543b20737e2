"""Authentication API routes.

Sign-in, sign-up and sessions are handled by the identity provider.
The backend validates its access tokens and manages the local user record.
"""

from fastapi import APIRouter, Depends

from finboard.api.deps import get_current_user
from finboard.models.user import User
from finboard.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def auth_me(user: User = Depends(get_current_user)):
    """Return the current authenticated user (auto-provisions on first call)."""
    return user
