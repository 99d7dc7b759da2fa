"""
PayPal API routes.

Routes:
    POST   /api/v1/paypal               — Payment, product, plan and subscription actions
    POST   /api/v1/paypal/subscription  — Premium status for the current user
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request
from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from edusphere.config import settings
from edusphere.database import get_db
from edusphere.errors import AppError, parse_action
from edusphere.middleware.identity import get_caller_id, get_current_user
from edusphere.models.user import User
from edusphere.schemas.paypal import (
    PayPalRequest,
    PremiumRequest,
    CreatePaymentRequest,
    CapturePaymentRequest,
    GetPaymentDetailsRequest,
    CreateProductRequest,
    CreatePlanRequest,
    CreateSubscriptionRequest,
    GetSubscriptionRequest,
    CancelSubscriptionRequest,
    GetClientTokenRequest,
    CheckPremiumRequest,
    StartPremiumRequest,
    CancelPremiumRequest,
    PayPalResult,
    ClientTokenResponse,
    PremiumStatusResponse,
    StartPremiumResponse,
)
from edusphere.services.paypal_client import PayPalClient
from edusphere.services.subscription_service import PremiumStatusService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/paypal", tags=["PayPal"])

paypal_request_adapter = TypeAdapter(PayPalRequest)
premium_request_adapter = TypeAdapter(PremiumRequest)

USER_REQUIRED_ACTIONS = (CreatePaymentRequest, CreateSubscriptionRequest, CancelSubscriptionRequest)


def get_paypal_client(request: Request) -> PayPalClient:
    """Process-wide PayPal client, created on first use and closed at shutdown."""
    client = getattr(request.app.state, "paypal_client", None)
    if client is None:
        client = PayPalClient.from_settings()
        request.app.state.paypal_client = client
    return client


def get_premium_service(
    request: Request,
    paypal: PayPalClient = Depends(get_paypal_client),
) -> PremiumStatusService:
    service = getattr(request.app.state, "premium_service", None)
    if service is None:
        service = PremiumStatusService(paypal, ttl_seconds=settings.PREMIUM_CACHE_TTL_SECONDS)
        request.app.state.premium_service = service
    return service


def _result(**fields) -> dict:
    return PayPalResult(**fields).model_dump(mode="json", exclude_none=True)


@router.post("")
async def paypal_action(
    payload: Any = Body(...),
    caller_id: Optional[str] = Depends(get_caller_id),
    paypal: PayPalClient = Depends(get_paypal_client),
):
    """Proxy one PayPal operation. Failed PayPal calls answer 502."""
    body = parse_action(paypal_request_adapter, payload)

    if isinstance(body, USER_REQUIRED_ACTIONS) and not caller_id:
        raise AppError.invalid("X-User-ID header is required for this action", "User ID required")

    if isinstance(body, GetClientTokenRequest):
        return ClientTokenResponse(
            client_id=paypal.client_id,
            environment=settings.PAYPAL_ENVIRONMENT,
        ).model_dump()

    if isinstance(body, CreatePaymentRequest):
        order = await paypal.create_order(
            body.amount,
            user_id=caller_id,
            currency=body.currency,
            description=body.description,
            reference_id=body.reference_id,
            return_url=body.return_url,
            cancel_url=body.cancel_url,
        )
        logger.info(f"Order {order.get('id')} created for {caller_id}")
        return _result(payment=order, links=order.get("links"), id=order.get("id"))

    if isinstance(body, CapturePaymentRequest):
        capture = await paypal.capture_order(body.order_id)
        return _result(capture=capture, status=capture.get("status"))

    if isinstance(body, GetPaymentDetailsRequest):
        order = await paypal.get_order(body.order_id)
        return _result(payment=order, status=order.get("status"))

    if isinstance(body, CreateProductRequest):
        product = await paypal.create_product(body.name, body.description, body.home_url)
        return _result(product=product, id=product.get("id"))

    if isinstance(body, CreatePlanRequest):
        plan = await paypal.create_plan(
            body.amount,
            product_id=body.product_id,
            name=body.name,
            description=body.description,
            currency=body.currency,
            interval_unit=body.interval_unit,
            interval_count=body.interval_count,
            total_cycles=body.total_cycles,
        )
        return _result(plan=plan, id=plan.get("id"))

    if isinstance(body, CreateSubscriptionRequest):
        subscriber = body.subscriber
        subscription = await paypal.create_subscription(
            body.plan_id,
            currency=body.currency,
            first_name=subscriber.first_name if subscriber else None,
            last_name=subscriber.last_name if subscriber else None,
            email=subscriber.email if subscriber else None,
            return_url=body.return_url,
            cancel_url=body.cancel_url,
        )
        return _result(
            subscription=subscription,
            id=subscription.get("id"),
            links=subscription.get("links"),
        )

    if isinstance(body, GetSubscriptionRequest):
        subscription = await paypal.get_subscription(body.subscription_id)
        return _result(subscription=subscription, status=subscription.get("status"))

    # CancelSubscriptionRequest
    await paypal.cancel_subscription(body.subscription_id, body.reason)
    logger.info(f"Subscription {body.subscription_id} cancelled by {caller_id}")
    return _result(message="Subscription cancelled successfully")


@router.post("/subscription")
async def premium_action(
    payload: Any = Body(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    premium: PremiumStatusService = Depends(get_premium_service),
):
    """Check, start or cancel the caller's premium subscription."""
    body = parse_action(premium_request_adapter, payload)
    user_id = current_user.clerk_id

    if isinstance(body, CheckPremiumRequest):
        status = await premium.check(db, user_id)
        return PremiumStatusResponse(**status).model_dump()

    if isinstance(body, StartPremiumRequest):
        subscriber = body.subscriber
        started = await premium.start(
            db,
            user_id,
            body.plan_id,
            first_name=(subscriber.first_name if subscriber else None) or current_user.first_name,
            last_name=(subscriber.last_name if subscriber else None) or current_user.last_name,
            email=(subscriber.email if subscriber else None) or current_user.email,
        )
        return StartPremiumResponse(**started).model_dump()

    if isinstance(body, CancelPremiumRequest):
        row = await premium.cancel(db, user_id, body.subscription_id, body.reason)
        return PremiumStatusResponse(
            is_active=False,
            has_subscription=True,
            subscription_id=row.subscription_id,
            status=row.status,
            message="Subscription cancelled successfully",
        ).model_dump()

    # PremiumDetailsRequest
    remote = await premium.details(db, user_id)
    return _result(subscription=remote, id=remote.get("id"), status=remote.get("status"))
