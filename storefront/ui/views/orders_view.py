"""Orders View: the customer's dashboard.

Stat tiles (total, delivered, in transit, pending, spent) over a list of
the customer's orders with their items and shipping details.
"""

from __future__ import annotations

import customtkinter as ctk

from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.enums import ShippingStatus
from storefront.models.order import Order, OrderStats
from storefront.models.service_models import ServiceResult
from storefront.services.order_service import OrderService
from storefront.ui.theme import (
    BADGE_CANCELLED,
    BADGE_DELIVERED,
    BADGE_IN_TRANSIT,
    BADGE_PENDING,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_CARD_TITLE,
    FONT_PRICE,
    FONT_SMALL,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from storefront.ui.view_base import BaseView
from storefront.utils.general import format_money

SHIPPING_BADGES: dict[ShippingStatus, str] = {
    ShippingStatus.PENDING: BADGE_PENDING,
    ShippingStatus.SHIPPED: BADGE_IN_TRANSIT,
    ShippingStatus.OUT_FOR_DELIVERY: BADGE_IN_TRANSIT,
    ShippingStatus.DELIVERED: BADGE_DELIVERED,
    ShippingStatus.CANCELLED: BADGE_CANCELLED,
}


def shipping_label(status: ShippingStatus) -> str:
    return str(status).replace("_", " ").title()


class OrdersView(BaseView):
    """Read-only order history for the signed-in customer."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        orders: OrderService,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, title="My Orders", logger=logger)
        self._orders = orders
        self._currency = config.CURRENCY_SYMBOL

        self._tiles = ctk.CTkFrame(self, fg_color="transparent")
        self._tiles.pack(fill="x", padx=PADDING_LG, pady=PADDING_SM)
        self._tile_values: dict[str, ctk.CTkLabel] = {}
        for key, label in (
            ("total_orders", "Orders"),
            ("delivered", "Delivered"),
            ("in_transit", "In transit"),
            ("pending", "Pending"),
            ("total_spent", "Total spent"),
        ):
            tile = ctk.CTkFrame(self._tiles, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
            tile.pack(side="left", expand=True, fill="x", padx=4)
            value = ctk.CTkLabel(tile, text="-", font=FONT_PRICE, text_color=TEXT_PRIMARY)
            value.pack(pady=(PADDING_SM, 0))
            ctk.CTkLabel(tile, text=label, font=FONT_SMALL, text_color=TEXT_SECONDARY).pack(pady=(0, PADDING_SM))
            self._tile_values[key] = value

        self._list = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._list.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))

    def on_show(self) -> None:
        self.show_status("Loading your orders...")
        self.run_in_background(self._orders.list_orders_for_user, self._render, name="orders-load")

    def _render(self, result: ServiceResult[list[Order]]) -> None:
        for child in self._list.winfo_children():
            child.destroy()
        if not result.success:
            self.show_error(result.error)
            return
        orders = result.data or []
        self._render_stats(self._orders.compute_stats(orders))
        if not orders:
            self.show_status("You have not placed any orders yet.")
            return
        self.clear_status()
        for order in orders:
            self._order_card(order)

    def _render_stats(self, stats: OrderStats) -> None:
        for key, label in self._tile_values.items():
            value = getattr(stats, key)
            text = format_money(value, self._currency) if key == "total_spent" else str(value)
            label.configure(text=text)

    def _order_card(self, order: Order) -> None:
        card = ctk.CTkFrame(self._list, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        card.pack(fill="x", pady=4)

        header = ctk.CTkFrame(card, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_MD, pady=(PADDING_SM, 0))
        placed = order.created_at.strftime("%d %b %Y") if order.created_at else ""
        ctk.CTkLabel(
            header, text=f"Order #{order.short_id}   {placed}", font=FONT_CARD_TITLE,
            text_color=TEXT_PRIMARY,
        ).pack(side="left")
        ctk.CTkLabel(
            header, text=f" {shipping_label(order.shipping_status)} ", font=FONT_SMALL,
            fg_color=SHIPPING_BADGES.get(order.shipping_status, BADGE_PENDING),
            text_color="#ffffff", corner_radius=6,
        ).pack(side="right")

        for item in order.order_items:
            name = item.product.name if item.product else item.product_id
            ctk.CTkLabel(
                card,
                text=f"{item.quantity} × {name}   {format_money(item.line_total, self._currency)}",
                font=FONT_BODY, text_color=TEXT_SECONDARY, anchor="w",
            ).pack(fill="x", padx=PADDING_MD)

        footer = f"Total {format_money(order.total_amount, self._currency)}"
        if order.courier_name:
            footer += f"   Courier: {order.courier_name}"
        if order.tracking_id:
            footer += f"   Tracking: {order.tracking_id}"
        ctk.CTkLabel(card, text=footer, font=FONT_BODY, text_color=TEXT_PRIMARY, anchor="w").pack(
            fill="x", padx=PADDING_MD, pady=(2, PADDING_SM),
        )
