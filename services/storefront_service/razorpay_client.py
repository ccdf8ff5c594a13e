"""
Razorpay API client for payment orders and payment lookups.

Provides async methods for:
- Creating gateway orders (amount in paise)
- Fetching a payment by id
- Listing the payments made against a gateway order
- Verifying checkout callback signatures (module-level helpers)
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx
from libs.common.config import get_settings

logger = logging.getLogger(__name__)

CAPTURED = "captured"


@dataclass
class GatewayOrder:
    """Razorpay order handle."""

    id: str
    amount: int  # in paise
    currency: str
    receipt: str
    status: str


@dataclass
class GatewayPayment:
    """Razorpay payment as reported by the gateway."""

    id: str
    order_id: Optional[str]
    amount: int  # in paise
    currency: str
    status: str  # created, authorized, captured, refunded, failed
    method: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def is_captured(self) -> bool:
        return self.status == CAPTURED


class RazorpayError(Exception):
    """Base exception for Razorpay API errors."""

    def __init__(
        self, message: str, status_code: int = None, response_data: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


def compute_signature(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    """Hex HMAC-SHA256 of "{order_id}|{payment_id}" keyed by the key secret."""
    message = f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_checkout_signature(
    secret: str, gateway_order_id: str, gateway_payment_id: str, signature: str
) -> bool:
    expected = compute_signature(secret, gateway_order_id, gateway_payment_id)
    # compare_digest only accepts ASCII str, so compare bytes.
    return hmac.compare_digest(
        expected.encode("ascii"), (signature or "").encode("utf-8")
    )


def _payment_from_payload(data: dict) -> GatewayPayment:
    return GatewayPayment(
        id=data["id"],
        order_id=data.get("order_id"),
        amount=int(data.get("amount") or 0),
        currency=data.get("currency") or "",
        status=data.get("status") or "",
        method=data.get("method"),
        raw=data,
    )


class RazorpayClient:
    """Async client for the Razorpay Orders and Payments APIs."""

    def __init__(
        self,
        key_id: str = None,
        key_secret: str = None,
        base_url: str = None,
        timeout: float = 30.0,
    ):
        settings = get_settings()
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        if not self.key_id or not self.key_secret:
            raise ValueError("RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required")
        self.base_url = (base_url or settings.RAZORPAY_BASE_URL).rstrip("/")
        self.timeout = timeout

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict = None,
        json_data: dict = None,
    ) -> dict:
        """Make an authenticated request to the Razorpay API."""
        url = f"{self.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    auth=(self.key_id, self.key_secret),
                    params=params,
                    json=json_data,
                )
        except httpx.RequestError as exc:
            raise RazorpayError(f"Razorpay unreachable: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            error = data.get("error") or {}
            logger.error(f"Razorpay API error: {response.status_code} - {error}")
            raise RazorpayError(
                message=error.get("description", "Unknown Razorpay error"),
                status_code=response.status_code,
                response_data=data,
            )

        return data

    # =========================================================================
    # Order Methods
    # =========================================================================

    async def create_order(
        self,
        *,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[dict] = None,
    ) -> GatewayOrder:
        """
        Create a Razorpay order.

        Args:
            amount: Amount in paise
            currency: ISO currency code, e.g. "INR"
            receipt: Merchant receipt string (derived from the internal order id)
            notes: Free-form key/values echoed back by the gateway

        Returns:
            GatewayOrder with the gateway's order id
        """
        data = await self._request(
            "POST",
            "/orders",
            json_data={
                "amount": amount,
                "currency": currency,
                "receipt": receipt,
                "notes": notes or {},
            },
        )
        return GatewayOrder(
            id=data["id"],
            amount=int(data.get("amount") or amount),
            currency=data.get("currency") or currency,
            receipt=data.get("receipt") or receipt,
            status=data.get("status") or "created",
        )

    async def fetch_order_payments(self, gateway_order_id: str) -> list[GatewayPayment]:
        """List every payment attempt made against a gateway order."""
        data = await self._request("GET", f"/orders/{gateway_order_id}/payments")
        return [_payment_from_payload(item) for item in data.get("items", [])]

    # =========================================================================
    # Payment Methods
    # =========================================================================

    async def fetch_payment(self, payment_id: str) -> GatewayPayment:
        """Fetch a payment by its gateway id."""
        data = await self._request("GET", f"/payments/{payment_id}")
        return _payment_from_payload(data)


def get_razorpay_client() -> RazorpayClient:
    """FastAPI dependency; overridden in tests."""
    return RazorpayClient()
