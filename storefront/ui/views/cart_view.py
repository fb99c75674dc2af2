"""Cart View.

Lists the signed-in customer's cart, lets them change quantities or
remove lines, and places a cash-on-delivery order.  The delivery form
is prefilled from the saved profile.
"""

from __future__ import annotations

from typing import Optional

import customtkinter as ctk
from pydantic import ValidationError

from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.cart import CartItem
from storefront.models.order import DeliveryAddress, Order
from storefront.models.profile import Profile
from storefront.models.service_models import ServiceResult
from storefront.services.auth_context import AuthContext
from storefront.services.cart_context import CartContext
from storefront.services.checkout_service import CheckoutService
from storefront.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_CARD_TITLE,
    FONT_PRICE,
    FONT_SMALL,
    INPUT_HEIGHT,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from storefront.ui.view_base import BaseView
from storefront.utils.general import format_money

_ADDRESS_FIELDS: tuple[tuple[str, str], ...] = (
    ("full_name", "Full name"),
    ("phone", "Phone"),
    ("address_line_1", "Address line 1"),
    ("address_line_2", "Address line 2"),
    ("city", "City"),
    ("state", "State"),
    ("postal_code", "Postal code"),
)


class CartView(BaseView):
    """Cart lines, total and checkout form."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        cart: CartContext,
        checkout: CheckoutService,
        auth: AuthContext,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, title="Your Cart", logger=logger)
        self._cart = cart
        self._checkout = checkout
        self._auth = auth
        self._currency = config.CURRENCY_SYMBOL
        self._prefilled_for: Optional[str] = None

        ctk.CTkButton(
            self._header_actions, text="Clear Cart", font=FONT_SMALL, fg_color="transparent",
            text_color=ERROR_TEXT, hover_color=CONTENT_CARD_BG, command=self._clear,
        ).pack(side="right")

        body = ctk.CTkFrame(self, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_SM)
        body.grid_columnconfigure(0, weight=3)
        body.grid_columnconfigure(1, weight=2)
        body.grid_rowconfigure(0, weight=1)

        self._lines = ctk.CTkScrollableFrame(body, fg_color="transparent")
        self._lines.grid(row=0, column=0, sticky="nsew", padx=(0, PADDING_SM))

        form = ctk.CTkScrollableFrame(body, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        form.grid(row=0, column=1, sticky="nsew")
        self._total_label = ctk.CTkLabel(form, text="", font=FONT_PRICE, text_color=TEXT_PRIMARY, anchor="w")
        self._total_label.pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))
        ctk.CTkLabel(
            form, text="Delivery details", font=FONT_CARD_TITLE, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD)
        self._entries: dict[str, ctk.CTkEntry] = {}
        for key, label in _ADDRESS_FIELDS:
            ctk.CTkLabel(form, text=label, font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
                fill="x", padx=PADDING_MD, pady=(PADDING_SM, 2),
            )
            entry = ctk.CTkEntry(form, height=INPUT_HEIGHT)
            entry.pack(fill="x", padx=PADDING_MD)
            self._entries[key] = entry
        ctk.CTkLabel(
            form, text="Payment: cash on delivery", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_SM, 0))
        self._place_button = ctk.CTkButton(
            form, text="Place Order", font=FONT_BUTTON, fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER, command=self._place_order,
        )
        self._place_button.pack(fill="x", padx=PADDING_MD, pady=PADDING_MD)

        self._remove_listener = self._cart.add_listener(self._on_cart_change)

    def destroy(self) -> None:
        self._remove_listener()
        super().destroy()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def on_show(self) -> None:
        self._prefill(self._auth.snapshot().profile)
        self._render(self._cart.items)
        self.run_in_background(self._cart.refresh_cart, self._on_result, name="cart-refresh")

    def _on_cart_change(self, items: list[CartItem]) -> None:
        # Cart listeners fire on worker threads.
        self._dispatch(lambda: self._render(items))

    def _render(self, items: list[CartItem]) -> None:
        for child in self._lines.winfo_children():
            child.destroy()
        total = self._cart.get_total_amount()
        self._total_label.configure(text=f"Total: {format_money(total, self._currency)}")
        self._place_button.configure(state="normal" if items else "disabled")
        if not items:
            ctk.CTkLabel(
                self._lines, text="Your cart is empty.", font=FONT_BODY, text_color=TEXT_SECONDARY,
            ).pack(pady=PADDING_LG)
            return
        for item in items:
            self._line_row(item)

    def _line_row(self, item: CartItem) -> None:
        row = ctk.CTkFrame(self._lines, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        row.pack(fill="x", pady=4)
        name = item.product.name if item.product else "Unavailable product"
        ctk.CTkLabel(row, text=name, font=FONT_BODY, text_color=TEXT_PRIMARY, anchor="w").pack(
            side="left", padx=PADDING_MD, pady=PADDING_SM,
        )
        ctk.CTkButton(
            row, text="✕", width=32, fg_color="transparent", text_color=ERROR_TEXT,
            hover_color=CONTENT_CARD_BG, command=lambda: self._remove(item),
        ).pack(side="right", padx=(0, PADDING_SM))
        ctk.CTkLabel(
            row, text=format_money(item.line_total, self._currency), font=FONT_BODY, width=90,
        ).pack(side="right")
        ctk.CTkButton(
            row, text="+", width=32, command=lambda: self._set_quantity(item, item.quantity + 1),
        ).pack(side="right")
        ctk.CTkLabel(row, text=str(item.quantity), width=36, font=FONT_BODY).pack(side="right")
        ctk.CTkButton(
            row, text="−", width=32,
            state="normal" if item.quantity > 1 else "disabled",
            command=lambda: self._set_quantity(item, item.quantity - 1),
        ).pack(side="right")

    def _prefill(self, profile: Optional[Profile]) -> None:
        if profile is None or self._prefilled_for == profile.id:
            return
        for key, entry in self._entries.items():
            value = getattr(profile, key, None)
            if value and not entry.get():
                entry.insert(0, value)
        self._prefilled_for = profile.id
        if not profile.has_address:
            self.show_status("Your saved address is incomplete. Please fill in the delivery details.")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _set_quantity(self, item: CartItem, quantity: int) -> None:
        self.run_in_background(
            lambda: self._cart.update_cart_item_quantity(item.id, quantity),
            self._on_result,
            name="cart-quantity",
        )

    def _remove(self, item: CartItem) -> None:
        self.run_in_background(
            lambda: self._cart.remove_from_cart(item.id), self._on_result, name="cart-remove",
        )

    def _clear(self) -> None:
        self.run_in_background(self._cart.clear_cart, self._on_result, name="cart-clear")

    def _on_result(self, result: ServiceResult[list[CartItem]]) -> None:
        if result.success:
            self.clear_status()
        else:
            self.show_error(result.error)

    def _place_order(self) -> None:
        values = {key: entry.get().strip() for key, entry in self._entries.items()}
        try:
            address = DeliveryAddress(
                full_name=values["full_name"] or None,
                address_line_1=values["address_line_1"],
                address_line_2=values["address_line_2"] or None,
                city=values["city"],
                state=values["state"],
                postal_code=values["postal_code"],
            )
        except ValidationError as exc:
            missing = sorted({str(err["loc"][-1]).replace("_", " ") for err in exc.errors()})
            self.show_error(f"Please fill in: {', '.join(missing)}.")
            return

        self._place_button.configure(state="disabled", text="Placing order...")
        self.run_in_background(
            lambda: self._checkout.checkout_cart(address, values["phone"]),
            self._on_order_placed,
            name="checkout",
        )

    def _on_order_placed(self, result: ServiceResult[Order]) -> None:
        self._place_button.configure(text="Place Order", state="normal")
        if result.success and result.data is not None:
            self.show_success(
                f"Order #{result.data.short_id} placed. We'll confirm by email. "
                f"Total {format_money(result.data.total_amount, self._currency)}."
            )
        else:
            self.show_error(result.error)
