"""Storefront commerce models: cart, orders, order line snapshots, payments."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.storefront_service.models.enums import (
    OrderChannel,
    OrderStatus,
    enum_values,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Upper bound on the quantity of a single cart or order line.
MAX_LINE_QUANTITY = 99

# ============================================================================
# CART MODELS
# ============================================================================


class CartItem(Base):
    """One line in a user's working cart."""

    __tablename__ = "store_cart_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("store_products.id", ondelete="CASCADE"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # "" means "no size"/"no color" so that the unique tuple below matches
    # absent and empty values alike (NULLs never collide in a unique index).
    size: Mapped[str] = mapped_column(
        String(50), default="", server_default="", nullable=False
    )
    color: Mapped[str] = mapped_column(
        String(50), default="", server_default="", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id", "product_id", "size", "color", name="uq_cart_line"
        ),
        CheckConstraint("quantity > 0", name="positive_quantity"),
    )

    product = relationship("Product")

    def __repr__(self):
        return f"<CartItem product={self.product_id} qty={self.quantity}>"


# ============================================================================
# ORDER MODELS
# ============================================================================


class Order(Base):
    """Placed purchases."""

    __tablename__ = "store_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    # Pricing (major units)
    subtotal_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    shipping_fee: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0", nullable=False
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            values_callable=enum_values,
            name="store_order_status_enum",
        ),
        default=OrderStatus.PENDING_PAYMENT,
        server_default="pending_payment",
        nullable=False,
    )
    channel: Mapped[OrderChannel] = mapped_column(
        SAEnum(
            OrderChannel,
            values_callable=enum_values,
            name="store_order_channel_enum",
        ),
        nullable=False,
    )

    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)
    billing_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)

    # Razorpay order handle; set once the gateway order exists
    gateway_order_id: Mapped[Optional[str]] = mapped_column(
        String(100), unique=True, nullable=True
    )

    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="non_negative_total"),
        Index("ix_store_orders_user_created", "user_id", "created_at"),
        Index("ix_store_orders_status_created", "status", "created_at"),
    )

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    transactions = relationship("PaymentTransaction", back_populates="order")

    @property
    def receipt(self) -> str:
        """Receipt string sent to the gateway, derived from the internal id."""
        return f"order_{self.id}"

    def __repr__(self):
        return f"<Order {self.id} status={self.status}>"


class OrderItem(Base):
    """Order line items (snapshot at order time)."""

    __tablename__ = "store_order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("store_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Snapshot at order time (products may change); no FK so catalog deletes
    # never touch order history.
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    __table_args__ = (CheckConstraint("quantity > 0", name="positive_quantity"),)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem {self.product_name} qty={self.quantity}>"


# ============================================================================
# PAYMENT MODELS
# ============================================================================


class PaymentTransaction(Base):
    """Append-only record of a verified gateway payment."""

    __tablename__ = "store_payment_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("store_orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # One row per gateway payment, however often the callback is delivered
    gateway_payment_id: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )
    gateway_order_id: Mapped[str] = mapped_column(String(100), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_method: Mapped[str] = mapped_column(
        String(50), default="unknown", server_default="unknown", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    order = relationship("Order", back_populates="transactions")

    def __repr__(self):
        return f"<PaymentTransaction {self.gateway_payment_id} {self.status}>"
