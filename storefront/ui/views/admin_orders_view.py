"""Admin Orders View.

Every order with the customer's contact details, a search box, and a
status/courier form for the selected order.  The header shows the count
of unread admin notifications with a "mark all read" action.
"""

from __future__ import annotations

from typing import Optional

import customtkinter as ctk

from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.content import AdminNotification
from storefront.models.enums import OrderStatus, ShippingStatus
from storefront.models.order import AdminOrderView, Order, OrderStatusUpdate
from storefront.models.service_models import ServiceResult
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_BUTTON,
    FONT_CARD_TITLE,
    FONT_SMALL,
    INPUT_HEIGHT,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SIDEBAR_ACTIVE,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from storefront.ui.view_base import BaseView
from storefront.ui.views.orders_view import shipping_label
from storefront.utils.general import format_money


class AdminOrdersView(BaseView):
    """Back-office order management."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        orders: OrderService,
        notifications: NotificationService,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, title="Manage Orders", logger=logger)
        self._orders = orders
        self._notifications = notifications
        self._currency = config.CURRENCY_SYMBOL
        self._views: list[AdminOrderView] = []
        self._selected: Optional[AdminOrderView] = None

        self._mark_read_button = ctk.CTkButton(
            self._header_actions, text="Mark all read", font=FONT_SMALL, width=110,
            command=self._mark_all_read,
        )
        self._mark_read_button.pack(side="right")
        self._unread_label = ctk.CTkLabel(
            self._header_actions, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY,
        )
        self._unread_label.pack(side="right", padx=PADDING_SM)

        self._search = ctk.CTkEntry(
            self, placeholder_text="Search by order id, name, email or phone", height=INPUT_HEIGHT,
        )
        self._search.pack(fill="x", padx=PADDING_LG, pady=PADDING_SM)
        self._search.bind("<KeyRelease>", lambda _event: self._render_list())

        body = ctk.CTkFrame(self, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        body.grid_columnconfigure(0, weight=3)
        body.grid_columnconfigure(1, weight=2)
        body.grid_rowconfigure(0, weight=1)

        self._list = ctk.CTkScrollableFrame(body, fg_color="transparent")
        self._list.grid(row=0, column=0, sticky="nsew", padx=(0, PADDING_SM))

        form = ctk.CTkFrame(body, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        form.grid(row=0, column=1, sticky="nsew")
        self._detail_label = ctk.CTkLabel(
            form, text="Select an order", font=FONT_CARD_TITLE, text_color=TEXT_PRIMARY,
            anchor="w", justify="left", wraplength=300,
        )
        self._detail_label.pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))

        ctk.CTkLabel(form, text="Order status", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
            fill="x", padx=PADDING_MD,
        )
        self._status = ctk.CTkOptionMenu(form, values=[str(s) for s in OrderStatus])
        self._status.pack(fill="x", padx=PADDING_MD)
        ctk.CTkLabel(form, text="Shipping status", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
            fill="x", padx=PADDING_MD, pady=(PADDING_SM, 0),
        )
        self._shipping = ctk.CTkOptionMenu(form, values=[str(s) for s in ShippingStatus])
        self._shipping.pack(fill="x", padx=PADDING_MD)

        self._courier_entries: dict[str, ctk.CTkEntry] = {}
        for key, label in (
            ("courier_name", "Courier"),
            ("courier_contact", "Courier contact"),
            ("tracking_id", "Tracking id"),
        ):
            ctk.CTkLabel(form, text=label, font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
                fill="x", padx=PADDING_MD, pady=(PADDING_SM, 0),
            )
            entry = ctk.CTkEntry(form, height=INPUT_HEIGHT)
            entry.pack(fill="x", padx=PADDING_MD)
            self._courier_entries[key] = entry

        self._save_button = ctk.CTkButton(
            form, text="Update Order", font=FONT_BUTTON, fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER, state="disabled", command=self._save,
        )
        self._save_button.pack(fill="x", padx=PADDING_MD, pady=PADDING_MD)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def on_show(self) -> None:
        self.show_status("Loading orders...")
        self.run_in_background(self._orders.list_all_orders, self._on_loaded, name="admin-orders")
        self.run_in_background(
            self._notifications.list_notifications, self._on_notifications, name="admin-notifications",
        )

    def _on_loaded(self, result: ServiceResult[list[AdminOrderView]]) -> None:
        if not result.success:
            self.show_error(result.error)
            return
        self.clear_status()
        self._views = result.data or []
        if self._selected is not None:
            selected_id = self._selected.order.id
            self._selected = next((v for v in self._views if v.order.id == selected_id), None)
        self._render_list()

    def _on_notifications(self, result: ServiceResult[list[AdminNotification]]) -> None:
        if not result.success:
            self._unread_label.configure(text="")
            return
        unread = self._notifications.unread_count(result.data or [])
        self._unread_label.configure(text=f"{unread} unread notification(s)")
        self._mark_read_button.configure(state="normal" if unread else "disabled")

    def _render_list(self) -> None:
        for child in self._list.winfo_children():
            child.destroy()
        views = self._orders.filter_orders(self._views, self._search.get())
        if not views:
            ctk.CTkLabel(self._list, text="No orders match.", font=FONT_BODY, text_color=TEXT_SECONDARY).pack(
                pady=PADDING_LG,
            )
            return
        for view in views:
            self._order_row(view)

    def _order_row(self, view: AdminOrderView) -> None:
        order = view.order
        selected = self._selected is not None and self._selected.order.id == order.id
        row = ctk.CTkButton(
            self._list,
            text=(
                f"#{order.short_id}  {view.customer_label}  "
                f"{format_money(order.total_amount, self._currency)}  "
                f"[{order.status} / {shipping_label(order.shipping_status)}]"
            ),
            font=FONT_BODY, anchor="w", corner_radius=CORNER_RADIUS,
            fg_color=SIDEBAR_ACTIVE if selected else CONTENT_CARD_BG,
            text_color="#ffffff" if selected else TEXT_PRIMARY,
            hover_color=SIDEBAR_ACTIVE,
            command=lambda: self._select(view),
        )
        row.pack(fill="x", pady=2)

    def _select(self, view: AdminOrderView) -> None:
        self._selected = view
        order = view.order
        address = order.delivery_address.one_line() if order.delivery_address else "No address"
        items = ", ".join(
            f"{item.quantity} × {item.product.name if item.product else item.product_id}"
            for item in order.order_items
        )
        self._detail_label.configure(
            text=(
                f"Order #{order.short_id}\n{view.customer_label}\n"
                f"{order.phone or ''}\n{address}\n{items}"
            )
        )
        self._status.set(str(order.status))
        self._shipping.set(str(order.shipping_status))
        for key, entry in self._courier_entries.items():
            entry.delete(0, "end")
            value = getattr(order, key)
            if value:
                entry.insert(0, value)
        self._save_button.configure(state="normal")
        self._render_list()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _save(self) -> None:
        if self._selected is None:
            return
        update = OrderStatusUpdate(
            order_id=self._selected.order.id,
            status=OrderStatus(self._status.get()),
            shipping_status=ShippingStatus(self._shipping.get()),
            **{key: entry.get() for key, entry in self._courier_entries.items()},
        )
        self._save_button.configure(state="disabled", text="Saving...")
        self.run_in_background(
            lambda: self._orders.update_order_status(update), self._on_saved, name="order-status",
        )

    def _on_saved(self, result: ServiceResult[Order]) -> None:
        self._save_button.configure(state="normal", text="Update Order")
        if not result.success:
            self.show_error(result.error)
            return
        self.show_success("Order updated.")
        self.run_in_background(self._orders.list_all_orders, self._on_loaded, name="admin-orders")

    def _mark_all_read(self) -> None:
        self.run_in_background(self._notifications.mark_all_read, self._on_marked, name="notifications-read")

    def _on_marked(self, result: ServiceResult[int]) -> None:
        if not result.success:
            self.show_error(result.error)
            return
        self._unread_label.configure(text="0 unread notification(s)")
        self._mark_read_button.configure(state="disabled")
