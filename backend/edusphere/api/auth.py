"""
Authentication API routes.

Routes:
    POST   /api/v1/auth   — Record a login or signup from the identity provider
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.database import get_db
from edusphere.schemas.auth import AuthRequest, AuthResponse
from edusphere.services.auth_service import sync_user

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("", response_model=AuthResponse)
async def authenticate(
    body: AuthRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Mirror the identity provider's user into the users table.
    Login and signup both upsert by clerk_id.
    """
    user = await sync_user(
        db,
        action=body.action,
        clerk_id=body.clerk_id,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    verb = "Signup" if body.action == "signup" else "Login"
    return AuthResponse(
        clerk_id=user.clerk_id,
        message=f"{verb} successful",
        timestamp=datetime.now(timezone.utc),
    )
