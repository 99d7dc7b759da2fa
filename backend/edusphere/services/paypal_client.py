"""
PayPal REST client.

Each call fetches a fresh client-credentials token and then performs one
request. Failures, whether transport errors or non-2xx answers, surface as
AppError UPSTREAM_FAILURE. There are no retries.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from edusphere.config import settings
from edusphere.errors import AppError

logger = logging.getLogger(__name__)


def approval_url(resource: Dict[str, Any]) -> Optional[str]:
    """The href of the resource's `approve` link, if any."""
    for link in resource.get("links") or []:
        if link.get("rel") == "approve":
            return link.get("href")
    return None


def _money(value: Decimal) -> str:
    return format(value, "f")


class PayPalClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        app_url: str = "http://localhost:3000",
        brand_name: str = "EduSphere AI",
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.app_url = app_url.rstrip("/")
        self.brand_name = brand_name
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "PayPalClient":
        return cls(
            client_id=settings.PAYPAL_CLIENT_ID,
            client_secret=settings.PAYPAL_CLIENT_SECRET,
            base_url=settings.paypal_base_url,
            timeout=settings.PAYPAL_TIMEOUT_SECONDS,
            transport=transport,
            app_url=settings.APP_URL,
            brand_name=settings.BRAND_NAME,
        )

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def aclose(self) -> None:
        await self._http.aclose()

    # ─── Transport ───────────────────────────────────────────────────────────

    async def get_access_token(self) -> str:
        if not self.configured:
            raise AppError.upstream("PayPal credentials are not configured")
        try:
            response = await self._http.post(
                "/v1/oauth2/token",
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                headers={"Accept": "application/json", "Accept-Language": "en_US"},
            )
        except httpx.HTTPError as e:
            raise AppError.upstream(f"PayPal auth request failed: {e}") from e

        if response.is_error:
            raise AppError.upstream(
                f"PayPal auth failed: {response.status_code}",
                {"upstream_status": response.status_code},
            )
        token = response.json().get("access_token")
        if not token:
            raise AppError.upstream("PayPal auth response carried no access token")
        return token

    async def _call(
        self,
        method: str,
        path: str,
        what: str,
        json: Optional[Dict[str, Any]] = None,
        request_id_prefix: Optional[str] = None,
    ) -> Dict[str, Any]:
        token = await self.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if request_id_prefix:
            headers["PayPal-Request-Id"] = f"{request_id_prefix}-{uuid.uuid4().hex}"

        try:
            response = await self._http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            raise AppError.upstream(f"PayPal {what} request failed: {e}") from e

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(f"PayPal {what} failed: {response.status_code} {detail}")
            raise AppError.upstream(
                f"PayPal {what} failed: {detail}",
                {"upstream_status": response.status_code},
            )

        if not response.content:
            return {}
        return response.json()

    # ─── Orders ──────────────────────────────────────────────────────────────

    async def create_order(
        self,
        amount: Decimal,
        user_id: str,
        currency: str = "USD",
        description: Optional[str] = None,
        reference_id: Optional[str] = None,
        return_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": reference_id or f"edusphere_{stamp}",
                    "amount": {"currency_code": currency, "value": _money(amount)},
                    "description": description or f"{self.brand_name} Premium Access",
                    "custom_id": user_id,
                    "invoice_id": f"INV-{stamp}",
                    "soft_descriptor": self.brand_name.upper()[:22],
                }
            ],
            "application_context": {
                "brand_name": self.brand_name,
                "locale": "en-US",
                "landing_page": "BILLING",
                "shipping_preference": "NO_SHIPPING",
                "user_action": "PAY_NOW",
                "return_url": return_url or f"{self.app_url}/payment-success",
                "cancel_url": cancel_url or f"{self.app_url}/payment-cancel",
            },
        }
        return await self._call("POST", "/v2/checkout/orders", "payment creation", payload, "order")

    async def capture_order(self, order_id: str) -> Dict[str, Any]:
        return await self._call(
            "POST", f"/v2/checkout/orders/{order_id}/capture", "capture", None, "capture"
        )

    async def get_order(self, order_id: str) -> Dict[str, Any]:
        return await self._call("GET", f"/v2/checkout/orders/{order_id}", "order fetch")

    # ─── Catalog and billing ─────────────────────────────────────────────────

    async def create_product(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        home_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            "name": name or f"{self.brand_name} Premium",
            "description": description or f"Premium access to all {self.brand_name} features",
            "type": "SERVICE",
            "category": "EDUCATIONAL_AND_TEXTBOOKS",
            "home_url": home_url or self.app_url,
        }
        return await self._call("POST", "/v1/catalogs/products", "product creation", payload, "product")

    async def create_plan(
        self,
        amount: Decimal,
        product_id: Optional[str] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        currency: str = "USD",
        interval_unit: str = "MONTH",
        interval_count: int = 1,
        total_cycles: int = 0,
    ) -> Dict[str, Any]:
        # total_cycles 0 bills until cancelled
        payload = {
            "product_id": product_id or "EDUSPHERE_PREMIUM",
            "name": name or f"{self.brand_name} Premium",
            "description": description or f"Premium access to all {self.brand_name} features",
            "status": "ACTIVE",
            "billing_cycles": [
                {
                    "frequency": {"interval_unit": interval_unit, "interval_count": interval_count},
                    "tenure_type": "REGULAR",
                    "sequence": 1,
                    "total_cycles": total_cycles,
                    "pricing_scheme": {
                        "fixed_price": {"value": _money(amount), "currency_code": currency}
                    },
                }
            ],
            "payment_preferences": {
                "auto_bill_outstanding": True,
                "setup_fee": {"value": "0", "currency_code": currency},
                "setup_fee_failure_action": "CONTINUE",
                "payment_failure_threshold": 3,
            },
            "taxes": {"percentage": "0", "inclusive": False},
        }
        return await self._call("POST", "/v1/billing/plans", "plan creation", payload, "plan")

    async def create_subscription(
        self,
        plan_id: str,
        currency: str = "USD",
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        return_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        start_time = datetime.now(timezone.utc) + timedelta(seconds=60)
        subscriber: Dict[str, Any] = {
            "name": {"given_name": first_name or "EduSphere", "surname": last_name or "User"},
        }
        if email:
            subscriber["email_address"] = email
        payload = {
            "plan_id": plan_id,
            "start_time": start_time.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "quantity": "1",
            "shipping_amount": {"currency_code": currency, "value": "0.00"},
            "subscriber": subscriber,
            "application_context": {
                "brand_name": self.brand_name,
                "locale": "en-US",
                "shipping_preference": "NO_SHIPPING",
                "user_action": "SUBSCRIBE_NOW",
                "payment_method": {
                    "payer_selected": "PAYPAL",
                    "payee_preferred": "IMMEDIATE_PAYMENT_REQUIRED",
                },
                "return_url": return_url or f"{self.app_url}/subscription/success",
                "cancel_url": cancel_url or f"{self.app_url}/subscription/cancel",
            },
        }
        return await self._call(
            "POST", "/v1/billing/subscriptions", "subscription creation", payload, "sub"
        )

    async def get_subscription(self, subscription_id: str) -> Dict[str, Any]:
        return await self._call(
            "GET", f"/v1/billing/subscriptions/{subscription_id}", "subscription fetch"
        )

    async def cancel_subscription(
        self,
        subscription_id: str,
        reason: str = "User requested cancellation",
    ) -> None:
        await self._call(
            "POST",
            f"/v1/billing/subscriptions/{subscription_id}/cancel",
            "subscription cancellation",
            {"reason": reason},
            "cancel",
        )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or str(response.status_code)
    if isinstance(body, dict):
        return body.get("message") or body.get("error_description") or str(response.status_code)
    return str(response.status_code)
