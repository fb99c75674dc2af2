"""
Checkout Service.

Turns a cart (signed-in customers) or an explicit list of lines (guests)
into an ``orders`` row plus its ``order_items``.

Pricing rule: every order item stores the unit price read at checkout
time, and the order's ``total_amount`` is the sum of price times
quantity over exactly those items, rounded to cents.

Only cash on delivery is accepted.  Emails and back-office alerts after
a successful order are best effort.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from storefront.access import access_denied
from storefront.logger import StructuredLogger
from storefront.models.enums import (
    NotificationType,
    OrderStatus,
    PaymentMethod,
    RouteAccess,
    ShippingStatus,
)
from storefront.models.order import DeliveryAddress, GuestCheckoutRequest, Order, OrderItem
from storefront.models.profile import ProfileUpdate
from storefront.models.service_models import ServiceResult
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService
from storefront.services.cart_context import CartContext
from storefront.services.notification_service import NotificationService
from storefront.utils.general import format_money, quantize_money

_ONLINE_PAYMENT_UNAVAILABLE = (
    "Online payment is coming soon. Please choose cash on delivery."
)


class CheckoutService(BaseService):
    """Places orders for signed-in customers and guests.

    Parameters
    ----------
    auth:
        Source of the current identity.
    cart:
        The signed-in customer's cart; cleared after a successful order.
    products:
        Catalogue lookup used to price guest orders.
    orders:
        Data access for ``orders`` and ``order_items``.
    profiles:
        Used to remember the delivery address on the customer's profile.
    notifications:
        Best-effort emails and back-office alerts.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        auth: AuthContext,
        cart: CartContext,
        products: ProductRepository,
        orders: OrderRepository,
        profiles: ProfileRepository,
        notifications: NotificationService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._auth = auth
        self._cart = cart
        self._products = products
        self._orders = orders
        self._profiles = profiles
        self._notifications = notifications

    # ------------------------------------------------------------------
    # Signed-in checkout
    # ------------------------------------------------------------------

    def checkout_cart(
        self,
        address: DeliveryAddress,
        phone: str,
        payment_method: PaymentMethod = PaymentMethod.COD,
        notes: Optional[str] = None,
    ) -> ServiceResult[Order]:
        """Place an order for everything in the signed-in customer's cart."""
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.AUTHENTICATED)
        if denied is not None:
            return denied
        assert snapshot.user is not None
        user = snapshot.user

        if payment_method != PaymentMethod.COD:
            return ServiceResult(success=False, error=_ONLINE_PAYMENT_UNAVAILABLE, status_code=400)
        phone = (phone or "").strip()
        if not phone:
            return ServiceResult(success=False, error="Phone number is required.", status_code=400)

        cart_items = self._cart.items
        if not cart_items:
            return ServiceResult(success=False, error="Your cart is empty.", status_code=400)
        unavailable = [item.product_id for item in cart_items if item.product is None]
        if unavailable:
            return ServiceResult(
                success=False,
                error="Some items in your cart are no longer available.",
                status_code=409,
            )

        full_name = address.full_name or (snapshot.profile.full_name if snapshot.profile else None)
        full_name = full_name or user.full_name
        self._remember_address(user.id, user.email, address, phone, full_name)

        items = [
            OrderItem(
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.unit_price,
            )
            for item in cart_items
        ]
        shipping_address = address.model_copy(update={"full_name": full_name})
        result = self._place_order(
            user_id=user.id,
            address=shipping_address,
            phone=phone,
            payment_method=payment_method,
            notes=notes,
            items=items,
        )
        if not result.success or result.data is None:
            return result
        order = result.data

        cleared = self._cart.clear_cart()
        if not cleared.success:
            self._logger.warning("Order %s placed but the cart was not cleared.", order.id)

        self._after_order(order, email=user.email, customer=full_name or user.email or user.id)
        return ServiceResult(success=True, data=order)

    # ------------------------------------------------------------------
    # Guest checkout
    # ------------------------------------------------------------------

    def guest_checkout(self, request: GuestCheckoutRequest) -> ServiceResult[Order]:
        """Place an order without an account, priced from the live catalogue."""
        if request.payment_method != PaymentMethod.COD:
            return ServiceResult(success=False, error=_ONLINE_PAYMENT_UNAVAILABLE, status_code=400)

        product_ids = list(dict.fromkeys(line.product_id for line in request.lines))
        try:
            catalogue = self._products.get_many(product_ids)
        except Exception as exc:
            self._logger.error("Guest checkout could not load products: %s", exc)
            return ServiceResult(
                success=False, error="Could not load product prices.", status_code=500,
            )

        items: list[OrderItem] = []
        for line in request.lines:
            product = catalogue.get(line.product_id)
            if product is None or not product.is_active:
                return ServiceResult(
                    success=False,
                    error=f"Product {line.product_id} is not available.",
                    status_code=400,
                )
            items.append(
                OrderItem(product_id=product.id, quantity=line.quantity, price=product.price)
            )

        address = request.address.model_copy(update={"full_name": request.full_name.strip()})
        result = self._place_order(
            user_id=None,
            address=address,
            phone=request.phone.strip(),
            payment_method=request.payment_method,
            notes=request.notes,
            items=items,
        )
        if not result.success or result.data is None:
            return result

        order = result.data
        self._after_order(order, email=request.email, customer=f"{request.full_name} (guest)")
        return ServiceResult(success=True, data=order)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def order_total(items: list[OrderItem]) -> Decimal:
        return quantize_money(sum((item.line_total for item in items), Decimal("0")))

    def _place_order(
        self,
        *,
        user_id: Optional[str],
        address: DeliveryAddress,
        phone: str,
        payment_method: PaymentMethod,
        notes: Optional[str],
        items: list[OrderItem],
    ) -> ServiceResult[Order]:
        values: dict[str, Any] = {
            "user_id": user_id,
            "total_amount": self.order_total(items),
            "delivery_address": address.model_dump(),
            "phone": phone,
            "payment_method": payment_method,
            "status": OrderStatus.PENDING,
            "shipping_status": ShippingStatus.PENDING,
            "notes": notes.strip() if notes and notes.strip() else None,
        }
        try:
            order = self._orders.create(values)
        except Exception as exc:
            self._logger.error("Order insert failed: %s", exc)
            return ServiceResult(
                success=False, error="Could not place your order. Please try again.", status_code=500,
            )

        try:
            self._orders.add_items(order.id, items)
        except Exception as exc:
            # The header row stays for the back office to reconcile.
            self._logger.error("Order items insert failed for %s: %s", order.id, exc)
            return ServiceResult(
                success=False,
                error=f"Order {order.short_id} was created but its items could not be saved. "
                      "Please contact the store.",
                status_code=500,
            )

        self._logger.info(
            "Order placed",
            extra={
                "order_id": order.id,
                "user_id": user_id or "guest",
                "total_amount": str(order.total_amount),
                "item_count": len(items),
            },
        )
        stored = self._orders.get_by_id(order.id)
        return ServiceResult(success=True, data=stored or order)

    def _remember_address(
        self,
        user_id: str,
        email: Optional[str],
        address: DeliveryAddress,
        phone: str,
        full_name: Optional[str],
    ) -> None:
        update = ProfileUpdate(
            full_name=full_name,
            address_line_1=address.address_line_1,
            address_line_2=address.address_line_2,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            phone=phone,
        )
        try:
            self._profiles.save_details(user_id, email, update)
        except Exception as exc:
            self._logger.warning("Could not save delivery address for %s: %s", user_id, exc)

    def _after_order(self, order: Order, *, email: Optional[str], customer: str) -> None:
        self._notifications.send_order_confirmation(email, order)
        self._notifications.notify_admins(
            NotificationType.NEW_ORDER,
            title=f"New order #{order.short_id}",
            message=f"{customer} placed an order for {format_money(order.total_amount)}.",
            user_id=order.user_id,
            order_id=order.id,
        )
