"""
Order Models.

Orders are written once at checkout and afterwards only mutated by
back-office status updates.  The delivery address is a copied snapshot,
never a reference to the profile.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.models.enums import OrderStatus, PaymentMethod, ShippingStatus


class DeliveryAddress(BaseModel):
    """Address snapshot stored as JSON on the order."""

    full_name: Optional[str] = None
    address_line_1: str = Field(min_length=1)
    address_line_2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)

    @field_validator("address_line_1", "city", "state", "postal_code", mode="before")
    @classmethod
    def _strip_required(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    def one_line(self) -> str:
        parts = [
            self.address_line_1,
            self.address_line_2,
            self.city,
            f"{self.state} {self.postal_code}",
        ]
        return ", ".join(p for p in parts if p)


class OrderProduct(BaseModel):
    """Product fields embedded in an order item for display."""

    name: str
    image_url: Optional[str] = None


class OrderItem(BaseModel):
    """An ``order_items`` row; ``price`` is the unit price at purchase."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    order_id: Optional[str] = None
    product_id: str
    quantity: int = Field(ge=1)
    price: Decimal
    product: Optional[OrderProduct] = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """An ``orders`` row, optionally with its items embedded."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    total_amount: Decimal
    delivery_address: Optional[DeliveryAddress] = None
    phone: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.COD
    status: OrderStatus = OrderStatus.PENDING
    shipping_status: ShippingStatus = ShippingStatus.PENDING
    courier_name: Optional[str] = None
    courier_contact: Optional[str] = None
    tracking_id: Optional[str] = None
    notes: Optional[str] = None
    order_items: list[OrderItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("order_items", mode="before")
    @classmethod
    def _none_to_list(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def short_id(self) -> str:
        return self.id[:8].upper()


class CheckoutLine(BaseModel):
    """One product and quantity in a guest checkout."""

    product_id: str
    quantity: int = Field(ge=1)


class GuestCheckoutRequest(BaseModel):
    """Everything a guest supplies to place an order without an account."""

    full_name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: str = Field(min_length=1)
    address: DeliveryAddress
    lines: list[CheckoutLine] = Field(min_length=1)
    payment_method: PaymentMethod = PaymentMethod.COD
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    """Back-office status change for one order."""

    order_id: str
    status: OrderStatus
    shipping_status: ShippingStatus
    courier_name: Optional[str] = None
    courier_contact: Optional[str] = None
    tracking_id: Optional[str] = None

    @field_validator("courier_name", "courier_contact", "tracking_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value


class OrderStats(BaseModel):
    """Customer dashboard counters."""

    total_orders: int = 0
    delivered: int = 0
    in_transit: int = 0
    pending: int = 0
    cancelled: int = 0
    total_spent: Decimal = Decimal("0")


class AdminOrderView(BaseModel):
    """An order joined with the customer's contact details."""

    order: Order
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None

    @property
    def customer_label(self) -> str:
        if self.order.is_guest:
            name = self.order.delivery_address.full_name if self.order.delivery_address else None
            return f"{name or 'Guest'} (guest)"
        return self.customer_name or self.customer_email or self.order.user_id or ""
