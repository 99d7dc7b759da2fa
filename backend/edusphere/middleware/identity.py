"""Caller identity dependencies for FastAPI."""

from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.database import get_db
from edusphere.errors import AppError
from edusphere.models.user import User
from edusphere.services.auth_service import subject_from_token
from edusphere.services.user_service import get_user_by_clerk_id

# Bearer token extractor
security = HTTPBearer(auto_error=False)


def resolve_caller_id(
    header_user_id: Optional[str],
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """
    The caller's external id: the X-User-ID header, else the subject of a
    valid bearer token.
    """
    if header_user_id and header_user_id.strip():
        return header_user_id.strip()
    if credentials:
        return subject_from_token(credentials.credentials)
    return None


async def get_caller_id(
    x_user_id: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Claimed caller id without any database check."""
    return resolve_caller_id(x_user_id, credentials)


async def get_current_user(
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the caller to a known user.
    Raises 401 when no id was supplied or no user row matches it.
    """
    if not caller_id:
        raise AppError.unauthorized("User ID required", "X-User-ID header is required")

    user = await get_user_by_clerk_id(db, caller_id)
    if not user:
        raise AppError.unauthorized("User not found", "User does not exist in database")
    return user


async def get_optional_user(
    caller_id: Optional[str] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous or unknown callers yield None."""
    if not caller_id:
        return None
    return await get_user_by_clerk_id(db, caller_id)
