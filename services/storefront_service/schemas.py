"""Pydantic schemas for the storefront service."""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from services.storefront_service.models import (
    MAX_LINE_QUANTITY,
    OrderChannel,
    OrderStatus,
)


def _parse_label_list(value: Any) -> list[str]:
    """Option labels arrive as a JSON array; legacy rows hold it as text."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        value = json.loads(value)
    if not isinstance(value, list):
        raise ValueError("expected a list of labels")
    return [str(label) for label in value]


def _empty_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None
    category: Optional[str] = None
    sizes: list[str] = []
    colors: list[str] = []
    stock_quantity: int
    is_featured: bool
    created_at: datetime
    updated_at: datetime

    @field_validator("sizes", "colors", mode="before")
    @classmethod
    def parse_labels(cls, v):
        return _parse_label_list(v)


# ============================================================================
# CART SCHEMAS
# ============================================================================


class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY)
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY)


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    product_id: int
    quantity: int
    size: Optional[str] = None
    color: Optional[str] = None

    # Live product fields, for display only
    name: Optional[str] = None
    price: Optional[Decimal] = None
    image_url: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    @field_validator("size", "color", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        return _empty_to_none(v)


class SuccessResponse(BaseModel):
    success: bool = True


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderCreate(BaseModel):
    """Standard (cart) checkout."""

    shipping_address: str = Field(..., min_length=1)
    billing_address: Optional[str] = None
    phone: str = Field(..., min_length=1, max_length=50)

    @field_validator("shipping_address", "phone")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("billing_address")
    @classmethod
    def blank_billing_as_none(cls, v):
        return _empty_to_none(v)


class OrderCreatedResponse(BaseModel):
    order_id: int = Field(..., serialization_alias="orderId")
    total: Decimal


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    product_name: str
    quantity: int
    size: Optional[str] = None
    color: Optional[str] = None
    unit_price: Decimal
    line_total: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    status: OrderStatus
    channel: OrderChannel

    subtotal_amount: Decimal
    shipping_fee: Decimal
    total_amount: Decimal

    shipping_address: str
    billing_address: Optional[str] = None
    phone: str

    gateway_order_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    items: list[OrderItemResponse] = []


# ============================================================================
# PAYMENT SCHEMAS
# ============================================================================


class PaymentOrderCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY)
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)


class PaymentOrderResponse(BaseModel):
    razorpay_order_id: str
    razorpay_key_id: str
    amount: int  # paise
    currency: str
    order_id: int
    product_name: str


class PaymentVerifyRequest(BaseModel):
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    order_id: int


class PaymentVerifyResponse(BaseModel):
    success: bool = True
    order_id: int
    payment_id: str
    status: OrderStatus


# ============================================================================
# BUY NOW SCHEMAS
# ============================================================================


class BuyNowRequest(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY)
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    shipping_address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, max_length=50)

    @field_validator("shipping_address", "phone")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class BuyNowResponse(BaseModel):
    success: bool = True
    order_id: int
    total: Decimal
