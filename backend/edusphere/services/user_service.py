"""User service: lookup and upsert of accounts mirrored from the identity provider."""

from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.models.user import User


async def get_user_by_clerk_id(db: AsyncSession, clerk_id: str) -> Optional[User]:
    """Get a user by external identity id."""
    result = await db.execute(select(User).where(User.clerk_id == clerk_id))
    return result.scalar_one_or_none()


async def upsert_user(
    db: AsyncSession,
    clerk_id: str,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> Tuple[User, bool]:
    """
    Create or refresh the user row for `clerk_id`.
    Names are only overwritten when provided.
    Returns (user, created).
    """
    user = await get_user_by_clerk_id(db, clerk_id)
    created = user is None
    if created:
        user = User(clerk_id=clerk_id, email=email)
        db.add(user)

    user.email = email
    if first_name:
        user.first_name = first_name
    if last_name:
        user.last_name = last_name
    user.updated_at = datetime.now(timezone.utc)

    await db.flush()
    await db.refresh(user)
    return user, created
