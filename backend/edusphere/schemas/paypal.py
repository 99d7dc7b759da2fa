"""Pydantic schemas for PayPal payment and subscription actions."""

from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field


class Subscriber(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None


# ─── /paypal actions ─────────────────────────────────────────────────────────

class CreatePaymentRequest(BaseModel):
    action: Literal["create_payment"]
    amount: Decimal = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    description: Optional[str] = None
    reference_id: Optional[str] = None
    return_url: Optional[str] = None
    cancel_url: Optional[str] = None


class CapturePaymentRequest(BaseModel):
    action: Literal["capture_payment"]
    order_id: str = Field(..., min_length=1)


class GetPaymentDetailsRequest(BaseModel):
    action: Literal["get_payment_details"]
    order_id: str = Field(..., min_length=1)


class CreateProductRequest(BaseModel):
    action: Literal["create_product"]
    name: Optional[str] = None
    description: Optional[str] = None
    home_url: Optional[str] = None


class CreatePlanRequest(BaseModel):
    action: Literal["create_plan"]
    product_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    interval_unit: Literal["DAY", "WEEK", "MONTH", "YEAR"] = "MONTH"
    interval_count: int = Field(1, ge=1)
    total_cycles: int = Field(0, ge=0)


class CreateSubscriptionRequest(BaseModel):
    action: Literal["create_subscription"]
    plan_id: str = Field(..., min_length=1)
    currency: str = Field("USD", min_length=3, max_length=3)
    subscriber: Optional[Subscriber] = None
    return_url: Optional[str] = None
    cancel_url: Optional[str] = None


class GetSubscriptionRequest(BaseModel):
    action: Literal["get_subscription"]
    subscription_id: str = Field(..., min_length=1)


class CancelSubscriptionRequest(BaseModel):
    action: Literal["cancel_subscription"]
    subscription_id: str = Field(..., min_length=1)
    reason: str = "User requested cancellation"


class GetClientTokenRequest(BaseModel):
    action: Literal["get_client_token"]


PayPalRequest = Annotated[
    Union[
        CreatePaymentRequest,
        CapturePaymentRequest,
        GetPaymentDetailsRequest,
        CreateProductRequest,
        CreatePlanRequest,
        CreateSubscriptionRequest,
        GetSubscriptionRequest,
        CancelSubscriptionRequest,
        GetClientTokenRequest,
    ],
    Field(discriminator="action"),
]


# ─── /paypal/subscription actions ────────────────────────────────────────────

class CheckPremiumRequest(BaseModel):
    action: Literal["check_subscription"]


class StartPremiumRequest(BaseModel):
    action: Literal["create_subscription"]
    plan_id: str = Field(..., min_length=1)
    subscriber: Optional[Subscriber] = None


class CancelPremiumRequest(BaseModel):
    action: Literal["cancel_subscription"]
    subscription_id: str = Field(..., min_length=1)
    reason: str = "User requested cancellation"


class PremiumDetailsRequest(BaseModel):
    action: Literal["get_subscription_details"]


PremiumRequest = Annotated[
    Union[
        CheckPremiumRequest,
        StartPremiumRequest,
        CancelPremiumRequest,
        PremiumDetailsRequest,
    ],
    Field(discriminator="action"),
]


class PremiumStatus(BaseModel):
    is_active: bool
    has_subscription: bool
    subscription_id: Optional[str] = None
    status: str
    message: Optional[str] = None


class PremiumStatusResponse(PremiumStatus):
    success: bool = True


class PayPalLink(BaseModel):
    href: str
    rel: str
    method: Optional[str] = None


class PayPalResult(BaseModel):
    """Generic envelope for proxied PayPal objects."""

    success: bool = True
    id: Optional[str] = None
    status: Optional[str] = None
    links: Optional[List[PayPalLink]] = None
    payment: Optional[Dict[str, Any]] = None
    capture: Optional[Dict[str, Any]] = None
    product: Optional[Dict[str, Any]] = None
    plan: Optional[Dict[str, Any]] = None
    subscription: Optional[Dict[str, Any]] = None
    message: Optional[str] = None


class ClientTokenResponse(BaseModel):
    success: bool = True
    client_id: str
    environment: str


class StartPremiumResponse(BaseModel):
    success: bool = True
    subscription_id: str
    approval_url: Optional[str] = None
    status: Optional[str] = None
