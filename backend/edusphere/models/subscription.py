"""PayPal subscriptions recorded per user."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Index

from edusphere.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    subscription_id = Column(String(64), nullable=False, unique=True)
    plan_id = Column(String(64), nullable=False)
    # PayPal status: APPROVAL_PENDING, APPROVED, ACTIVE, SUSPENDED, CANCELLED, EXPIRED
    status = Column(String(30), nullable=False, default="APPROVAL_PENDING")

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("ix_user_subscriptions_user_created", "user_id", "created_at"),
    )
