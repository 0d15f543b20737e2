"""Security utilities: OIDC access token validation and user provisioning."""

import time

import httpx
import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finboard.config import settings
from finboard.core.database import get_db
from finboard.core.exceptions import UnauthorizedError

logger = structlog.get_logger()

# ── JWKS cache ────────────────────────────────────
_jwks_cache: dict | None = None
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 300  # 5 minutes

# httpx transport used for the JWKS request (None = network)
jwks_transport: httpx.AsyncBaseTransport | None = None


async def _fetch_jwks() -> dict:
    """Fetch the JSON Web Key Set from the auth provider."""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        async with httpx.AsyncClient(transport=jwks_transport) as client:
            response = await client.get(settings.auth_jwks_url, timeout=10)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("jwks_fetch_failed", url=settings.auth_jwks_url, error=str(e))
        raise UnauthorizedError("Unable to verify token") from e

    _jwks_cache = response.json()
    _jwks_cache_time = now
    logger.info("JWKS fetched from auth provider", url=settings.auth_jwks_url)
    return _jwks_cache


def _find_signing_key(jwks: dict, kid: str) -> dict | None:
    """Find the signing key matching the token's kid."""
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key
    return None


async def decode_access_token(token: str) -> dict:
    """Decode and validate a provider-issued access token (RS256)."""
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise UnauthorizedError("Invalid token header") from e

    kid = unverified_header.get("kid")
    if not kid:
        raise UnauthorizedError("Token missing key ID")

    jwks = await _fetch_jwks()
    signing_key = _find_signing_key(jwks, kid)

    if not signing_key:
        # Key may have rotated, force refresh
        global _jwks_cache_time
        _jwks_cache_time = 0
        jwks = await _fetch_jwks()
        signing_key = _find_signing_key(jwks, kid)

    if not signing_key:
        raise UnauthorizedError("Unable to find matching signing key")

    try:
        return jwt.decode(
            token,
            signing_key,
            algorithms=["RS256"],
            audience=settings.auth_audience,
            issuer=settings.auth_issuer_url,
            options={
                "verify_aud": settings.auth_audience is not None,
                "require_aud": settings.auth_audience is not None,
                "verify_at_hash": False,
            },
        )
    except JWTError as e:
        raise UnauthorizedError("Invalid or expired token") from e


# ── Auth Dependencies ─────────────────────────────
security_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
):
    """FastAPI dependency: validate the bearer JWT and return (or provision) the local user."""
    from finboard.models.user import User

    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    payload = await decode_access_token(credentials.credentials)

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Token missing subject")

    result = await db.execute(select(User).where(User.auth_subject == subject))
    user = result.scalar_one_or_none()

    email = payload.get("email", "")
    full_name = payload.get("name", "") or _build_name(payload)

    if user is None:
        user = User(
            auth_subject=subject,
            email=email,
            full_name=full_name or None,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info("Auto-provisioned local user", auth_subject=subject, email=email)
        return user

    if not user.is_active:
        raise UnauthorizedError("User is disabled")

    # Sync email/name if changed at the provider
    changed = False
    if email and user.email != email:
        user.email = email
        changed = True
    if full_name and user.full_name != full_name:
        user.full_name = full_name
        changed = True
    if changed:
        await db.flush()

    return user


def _build_name(payload: dict) -> str:
    """Build full name from given_name + family_name claims."""
    parts = [payload.get("given_name", ""), payload.get("family_name", "")]
    return " ".join(p for p in parts if p).strip()
