"""Premium status: stored PayPal subscriptions with a short-lived per-user cache."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from cachetools import TTLCache
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.errors import AppError
from edusphere.models.subscription import UserSubscription
from edusphere.services.paypal_client import PayPalClient, approval_url

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = frozenset({"ACTIVE"})

DEMO_STATUS = {
    "is_active": False,
    "has_subscription": False,
    "subscription_id": None,
    "status": "demo_mode",
    "message": "PayPal not configured - demo mode",
}


async def latest_subscription(db: AsyncSession, user_id: str) -> Optional[UserSubscription]:
    result = await db.execute(
        select(UserSubscription)
        .where(UserSubscription.user_id == user_id)
        .order_by(UserSubscription.created_at.desc(), UserSubscription.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_subscription_row(db: AsyncSession, subscription_id: str) -> Optional[UserSubscription]:
    result = await db.execute(
        select(UserSubscription).where(UserSubscription.subscription_id == subscription_id)
    )
    return result.scalar_one_or_none()


class PremiumStatusService:
    """
    Resolves whether a user holds an active premium subscription.

    Status lookups are cached per user for `ttl_seconds`, measured with
    `clock`. Any write through this service drops the user's entry.
    """

    def __init__(
        self,
        paypal: PayPalClient,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
        maxsize: int = 10_000,
    ):
        self.paypal = paypal
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=clock)

    def invalidate(self, user_id: Optional[str] = None) -> None:
        if user_id is None:
            self._cache.clear()
        else:
            self._cache.pop(user_id, None)

    async def check(self, db: AsyncSession, user_id: str) -> Dict[str, Any]:
        if not self.paypal.configured:
            logger.info("PayPal not configured, returning demo subscription status")
            return dict(DEMO_STATUS)

        cached = self._cache.get(user_id)
        if cached is not None:
            return dict(cached)

        row = await latest_subscription(db, user_id)
        if row is None:
            status = {
                "is_active": False,
                "has_subscription": False,
                "subscription_id": None,
                "status": "inactive",
                "message": "No active subscription found",
            }
        else:
            await self._refresh(row)
            status = {
                "is_active": row.status in ACTIVE_STATUSES,
                "has_subscription": True,
                "subscription_id": row.subscription_id,
                "status": row.status,
                "message": None,
            }

        self._cache[user_id] = status
        return dict(status)

    async def start(
        self,
        db: AsyncSession,
        user_id: str,
        plan_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Dict[str, Any]:
        created = await self.paypal.create_subscription(
            plan_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
        )
        subscription_id = created.get("id")
        if not subscription_id:
            raise AppError.upstream("Invalid subscription response from PayPal")

        row = UserSubscription(
            user_id=user_id,
            subscription_id=subscription_id,
            plan_id=plan_id,
            status=created.get("status") or "APPROVAL_PENDING",
        )
        db.add(row)
        await db.flush()
        self.invalidate(user_id)

        logger.info(f"Subscription {subscription_id} created for {user_id} on plan {plan_id}")
        return {
            "subscription_id": subscription_id,
            "approval_url": approval_url(created),
            "status": row.status,
        }

    async def cancel(
        self,
        db: AsyncSession,
        user_id: str,
        subscription_id: str,
        reason: str = "User requested cancellation",
    ) -> UserSubscription:
        row = await get_subscription_row(db, subscription_id)
        if row is None:
            raise AppError.not_found("Subscription not found", f"No subscription '{subscription_id}' on record")
        if row.user_id != user_id:
            raise AppError.forbidden("Access denied", "Subscription belongs to another user")

        await self.paypal.cancel_subscription(subscription_id, reason)
        row.status = "CANCELLED"
        row.updated_at = datetime.now(timezone.utc)
        await db.flush()
        self.invalidate(user_id)

        logger.info(f"Subscription {subscription_id} cancelled for {user_id}")
        return row

    async def details(self, db: AsyncSession, user_id: str) -> Dict[str, Any]:
        row = await latest_subscription(db, user_id)
        if row is None:
            raise AppError.not_found("Subscription not found", "No subscription on record for this user")
        remote = await self._refresh(row)
        self.invalidate(user_id)
        return remote

    async def _refresh(self, row: UserSubscription) -> Dict[str, Any]:
        """Pull the subscription from PayPal and store its current status."""
        remote = await self.paypal.get_subscription(row.subscription_id)
        status = remote.get("status")
        if status and status != row.status:
            logger.info(f"Subscription {row.subscription_id}: {row.status} -> {status}")
            row.status = status
            row.updated_at = datetime.now(timezone.utc)
        return remote
