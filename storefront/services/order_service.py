"""
Order Service.

Customer order history and the back-office order desk.  Customers only
ever see their own orders (row policies enforce this as well); the desk
lists every order joined with the customer's contact details and
applies status changes, each of which is audit-logged.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from storefront.access import access_denied
from storefront.logger import StructuredLogger
from storefront.models.enums import OrderStatus, RouteAccess, ShippingStatus
from storefront.models.order import AdminOrderView, Order, OrderStats, OrderStatusUpdate
from storefront.models.service_models import ServiceResult
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService
from storefront.utils.audit import log_audit_event

_IN_TRANSIT = (ShippingStatus.SHIPPED, ShippingStatus.OUT_FOR_DELIVERY)


class OrderService(BaseService):
    """Service layer for order history and back-office order updates."""

    def __init__(
        self,
        auth: AuthContext,
        orders: OrderRepository,
        profiles: ProfileRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._auth = auth
        self._orders = orders
        self._profiles = profiles

    # ------------------------------------------------------------------
    # Customer
    # ------------------------------------------------------------------

    def list_orders_for_user(self) -> ServiceResult[list[Order]]:
        """The signed-in customer's orders with items, newest first."""
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.AUTHENTICATED)
        if denied is not None:
            return denied
        assert snapshot.user is not None

        try:
            orders = self._orders.list_for_user(snapshot.user.id)
        except Exception as exc:
            self._logger.error("Failed to fetch orders for %s: %s", snapshot.user.id, exc)
            return ServiceResult(
                success=False, error="Could not load your orders.", status_code=500,
            )
        return ServiceResult(success=True, data=orders)

    def get_order(self, order_id: str) -> ServiceResult[Order]:
        """One order.  Customers may open only their own; admins any."""
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.AUTHENTICATED)
        if denied is not None:
            return denied
        assert snapshot.user is not None

        order: Optional[Order] = self._orders.get_by_id(order_id)
        if order is None or (order.user_id != snapshot.user.id and not snapshot.is_admin):
            return ServiceResult(success=False, error="Order not found.", status_code=404)
        return ServiceResult(success=True, data=order)

    @staticmethod
    def compute_stats(orders: list[Order]) -> OrderStats:
        """Dashboard counters.  ``total_spent`` excludes cancelled orders."""
        stats = OrderStats(total_orders=len(orders))
        spent = Decimal("0")
        for order in orders:
            cancelled = (
                order.status == OrderStatus.CANCELLED
                or order.shipping_status == ShippingStatus.CANCELLED
            )
            if cancelled:
                stats.cancelled += 1
                continue
            spent += order.total_amount
            if order.shipping_status == ShippingStatus.DELIVERED:
                stats.delivered += 1
            elif order.shipping_status in _IN_TRANSIT:
                stats.in_transit += 1
            else:
                stats.pending += 1
        stats.total_spent = spent
        return stats

    # ------------------------------------------------------------------
    # Back office
    # ------------------------------------------------------------------

    def list_all_orders(self) -> ServiceResult[list[AdminOrderView]]:
        """Every order with the customer's name and email, newest first."""
        denied = access_denied(self._auth.snapshot(), RouteAccess.ADMIN)
        if denied is not None:
            return denied

        try:
            orders = self._orders.list_all()
        except Exception as exc:
            self._logger.error("Failed to fetch all orders: %s", exc)
            return ServiceResult(success=False, error="Could not load orders.", status_code=500)

        user_ids = sorted({o.user_id for o in orders if o.user_id is not None})
        customers = self._profiles.get_many(user_ids)
        views = []
        for order in orders:
            profile = customers.get(order.user_id) if order.user_id else None
            views.append(
                AdminOrderView(
                    order=order,
                    customer_name=profile.full_name if profile else None,
                    customer_email=profile.email if profile else None,
                )
            )
        return ServiceResult(success=True, data=views)

    @staticmethod
    def filter_orders(views: list[AdminOrderView], term: str) -> list[AdminOrderView]:
        """Case-insensitive match on order id prefix, email, name or phone."""
        needle = (term or "").strip().lower()
        if not needle:
            return list(views)

        def _matches(view: AdminOrderView) -> bool:
            order = view.order
            if order.id.lower().startswith(needle):
                return True
            guest_name = order.delivery_address.full_name if order.delivery_address else None
            haystack = (view.customer_email, view.customer_name, guest_name, order.phone)
            return any(needle in value.lower() for value in haystack if value)

        return [view for view in views if _matches(view)]

    def update_order_status(self, update: OrderStatusUpdate) -> ServiceResult[Order]:
        """Apply status, shipping status and courier details to one order."""
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.ADMIN)
        if denied is not None:
            return denied

        try:
            order = self._orders.update_status(update)
        except Exception as exc:
            self._logger.error("Status update failed for order %s: %s", update.order_id, exc)
            return ServiceResult(
                success=False, error="Could not update the order.", status_code=500,
            )
        if order is None:
            return ServiceResult(success=False, error="Order not found.", status_code=404)

        log_audit_event(
            logger=self._logger,
            action="UPDATE_ORDER_STATUS",
            entity_type="Order",
            entity_id=update.order_id,
            user_id=snapshot.user.id if snapshot.user else None,
            details={
                "status": str(update.status),
                "shipping_status": str(update.shipping_status),
                "courier_name": update.courier_name,
                "tracking_id": update.tracking_id,
            },
        )
        return ServiceResult(success=True, data=order)
