"""Authentication service: bearer-token decoding and login/signup sync."""

import logging
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.config import settings
from edusphere.models.user import User
from edusphere.services.user_service import upsert_user

logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> dict:
    """
    Decode a Supabase-issued access token. Raises JWTError on failure,
    including when no signing secret is configured.
    """
    if not settings.SUPABASE_JWT_SECRET:
        raise JWTError("Bearer tokens are not accepted: SUPABASE_JWT_SECRET is not set")
    payload = jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    if not payload.get("sub"):
        raise JWTError("Token has no subject")
    return payload


def subject_from_token(token: str) -> Optional[str]:
    """Return the token's subject, or None when the token is not acceptable."""
    try:
        return str(decode_access_token(token)["sub"])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None


async def sync_user(
    db: AsyncSession,
    action: str,
    clerk_id: str,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> User:
    """Store the identity provider's view of the user on login or signup."""
    user, created = await upsert_user(db, clerk_id, email, first_name, last_name)
    logger.info(f"User {action}: clerk_id={clerk_id} created={created}")
    return user
