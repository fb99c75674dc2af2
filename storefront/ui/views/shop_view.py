"""Shop View: the public catalogue.

Shows the first published banner, a strip of featured products, a
category filter and product cards.  Reviews open in a read-only dialog:
per product from each card, brand reviews from the toolbar.
Signed-in customers add to their cart; guests either sign in or use
"Buy Now", which opens the guest checkout dialog.

**Thin UI Rule**: reads from the services, displays, delegates.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

import customtkinter as ctk
from pydantic import ValidationError

from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.content import Banner, Review
from storefront.models.enums import ProductCategory
from storefront.models.order import CheckoutLine, DeliveryAddress, GuestCheckoutRequest, Order
from storefront.models.product import Product
from storefront.models.service_models import ServiceResult
from storefront.services.auth_context import AuthContext
from storefront.services.banner_service import BannerService
from storefront.services.cart_context import CartContext
from storefront.services.checkout_service import CheckoutService
from storefront.services.product_service import ProductService
from storefront.services.review_service import ReviewService
from storefront.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_CARD_TITLE,
    FONT_HEADING,
    FONT_LABEL,
    FONT_PRICE,
    FONT_SMALL,
    INPUT_HEIGHT,
    OFFER_TEXT,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from storefront.ui.view_base import BaseView
from storefront.utils.general import format_money

_ALL_CATEGORIES = "All"
_CATEGORY_LABELS: dict[str, Optional[ProductCategory]] = {
    _ALL_CATEGORIES: None,
    "Chicken": ProductCategory.CHICKEN,
    "Red Meat": ProductCategory.RED_MEAT,
    "Chilli & Condiments": ProductCategory.CHILLI_CONDIMENTS,
    "Other": ProductCategory.OTHER,
}
_GRID_COLUMNS: int = 3


class ShopView(BaseView):
    """Product grid with add-to-cart and guest Buy Now.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    products:
        Catalogue reads.
    banners:
        Published hero banner.
    reviews:
        Product and brand reviews.
    cart:
        The signed-in customer's cart.
    checkout:
        Used for guest orders.
    auth:
        Tells guests and customers apart.
    config:
        Currency symbol.
    on_sign_in:
        Opens the login view.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        products: ProductService,
        banners: BannerService,
        reviews: ReviewService,
        cart: CartContext,
        checkout: CheckoutService,
        auth: AuthContext,
        config: AppConfig,
        on_sign_in: Callable[[], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, title="Shop", logger=logger)
        self._products = products
        self._banners = banners
        self._reviews = reviews
        self._cart = cart
        self._checkout = checkout
        self._auth = auth
        self._currency = config.CURRENCY_SYMBOL
        self._on_sign_in = on_sign_in
        self._category: Optional[ProductCategory] = None

        self._banner_frame = ctk.CTkFrame(self, fg_color=ACCENT_PRIMARY, corner_radius=CORNER_RADIUS)
        self._banner_title = ctk.CTkLabel(
            self._banner_frame, text="", font=FONT_HEADING, text_color=TEXT_LIGHT, anchor="w",
        )
        self._banner_title.pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 0))
        self._banner_subtitle = ctk.CTkLabel(
            self._banner_frame, text="", font=FONT_BODY, text_color=TEXT_LIGHT, anchor="w",
        )
        self._banner_subtitle.pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))

        self._featured_frame = ctk.CTkFrame(self, fg_color="transparent")
        ctk.CTkLabel(
            self._featured_frame, text="Featured", font=FONT_LABEL, text_color=TEXT_SECONDARY,
        ).pack(side="left", padx=(0, PADDING_SM))
        self._featured_row = ctk.CTkFrame(self._featured_frame, fg_color="transparent")
        self._featured_row.pack(side="left", fill="x", expand=True)

        self._toolbar = ctk.CTkFrame(self, fg_color="transparent")
        self._toolbar.pack(fill="x", padx=PADDING_LG, pady=PADDING_SM)
        self._filter = ctk.CTkSegmentedButton(
            self._toolbar, values=list(_CATEGORY_LABELS), command=self._on_category_selected,
        )
        self._filter.set(_ALL_CATEGORIES)
        self._filter.pack(side="left")
        ctk.CTkButton(
            self._toolbar, text="Customer Reviews", font=FONT_BUTTON, width=150,
            fg_color="transparent", border_width=1, border_color=ACCENT_PRIMARY,
            text_color=ACCENT_PRIMARY, hover_color=CONTENT_CARD_BG,
            command=lambda: self._show_reviews(None),
        ).pack(side="right")

        self._grid = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._grid.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        for column in range(_GRID_COLUMNS):
            self._grid.grid_columnconfigure(column, weight=1)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def on_show(self) -> None:
        self.show_status("Loading products...")
        category = self._category
        self.run_in_background(
            lambda: (
                self._banners.list_published(),
                # The strip only shows on the unfiltered catalogue.
                self._products.list_featured() if category is None else [],
                self._products.list_products(category=category),
            ),
            self._render,
            name="shop-load",
        )

    def _on_category_selected(self, label: str) -> None:
        self._category = _CATEGORY_LABELS.get(label)
        self.on_show()

    def _render(self, loaded: tuple[list[Banner], list[Product], list[Product]]) -> None:
        banners, featured, products = loaded
        if banners:
            self._banner_title.configure(text=banners[0].title)
            self._banner_subtitle.configure(text=banners[0].subtitle or "")
            self._banner_frame.pack(fill="x", padx=PADDING_LG, pady=PADDING_SM, before=self._toolbar)
        else:
            self._banner_frame.pack_forget()
        self._render_featured(featured)

        for child in self._grid.winfo_children():
            child.destroy()
        if not products:
            self.show_status("No products available right now.")
            return
        self.clear_status()
        for index, product in enumerate(products):
            card = self._product_card(product)
            card.grid(
                row=index // _GRID_COLUMNS, column=index % _GRID_COLUMNS,
                padx=PADDING_SM, pady=PADDING_SM, sticky="nsew",
            )

    def _render_featured(self, featured: list[Product]) -> None:
        for child in self._featured_row.winfo_children():
            child.destroy()
        if not featured:
            self._featured_frame.pack_forget()
            return
        for product in featured:
            ctk.CTkButton(
                self._featured_row, text=product.name, font=FONT_SMALL, height=28,
                fg_color=CONTENT_CARD_BG, text_color=TEXT_PRIMARY, hover_color=CONTENT_BG,
                command=lambda p=product: self._show_reviews(p),
            ).pack(side="left", padx=(0, PADDING_SM))
        self._featured_frame.pack(fill="x", padx=PADDING_LG, pady=(PADDING_SM, 0), before=self._toolbar)

    def _product_card(self, product: Product) -> ctk.CTkFrame:
        card = ctk.CTkFrame(self._grid, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        ctk.CTkLabel(
            card, text=product.name, font=FONT_CARD_TITLE, text_color=TEXT_PRIMARY,
            anchor="w", wraplength=260,
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 2))
        if product.description:
            ctk.CTkLabel(
                card, text=product.description, font=FONT_SMALL, text_color=TEXT_SECONDARY,
                anchor="w", justify="left", wraplength=260,
            ).pack(fill="x", padx=PADDING_MD)

        price_row = ctk.CTkFrame(card, fg_color="transparent")
        price_row.pack(fill="x", padx=PADDING_MD, pady=PADDING_SM)
        ctk.CTkLabel(
            price_row, text=format_money(product.price, self._currency),
            font=FONT_PRICE, text_color=TEXT_PRIMARY,
        ).pack(side="left")
        if product.has_offer:
            ctk.CTkLabel(
                price_row, text=f"  Offer {format_money(product.offer_price, self._currency)}",
                font=FONT_SMALL, text_color=OFFER_TEXT,
            ).pack(side="left")
        if not product.in_stock:
            ctk.CTkLabel(
                price_row, text="Out of stock", font=FONT_SMALL, text_color=ERROR_TEXT,
            ).pack(side="right")

        ctk.CTkButton(
            card, text="Reviews", font=FONT_SMALL, height=24, fg_color="transparent",
            text_color=ACCENT_PRIMARY, hover_color=CONTENT_BG, anchor="w",
            command=lambda: self._show_reviews(product),
        ).pack(fill="x", padx=PADDING_MD)

        buttons = ctk.CTkFrame(card, fg_color="transparent")
        buttons.pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))
        state = "normal" if product.in_stock else "disabled"
        ctk.CTkButton(
            buttons, text="Add to Cart", font=FONT_BUTTON, fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER, state=state,
            command=lambda: self._add_to_cart(product),
        ).pack(side="left", expand=True, fill="x", padx=(0, 4))
        ctk.CTkButton(
            buttons, text="Buy Now", font=FONT_BUTTON, fg_color="transparent",
            border_width=1, border_color=ACCENT_PRIMARY, text_color=ACCENT_PRIMARY,
            hover_color=CONTENT_CARD_BG, state=state,
            command=lambda: self._buy_now(product),
        ).pack(side="left", expand=True, fill="x", padx=(4, 0))
        return card

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _add_to_cart(self, product: Product) -> None:
        if not self._auth.snapshot().is_authenticated:
            self.show_error("Please sign in to add items to your cart.")
            self._on_sign_in()
            return
        self.run_in_background(
            lambda: self._cart.add_to_cart(product.id, 1),
            lambda result: self._on_added(product, result),
            name="add-to-cart",
        )

    def _on_added(self, product: Product, result: ServiceResult[object]) -> None:
        if result.success:
            self.show_success(f"Added {product.name} to your cart.")
        else:
            self.show_error(result.error)

    def _show_reviews(self, product: Optional[Product]) -> None:
        product_id = product.id if product is not None else None
        title = f"Reviews: {product.name}" if product is not None else "Customer Reviews"
        self.run_in_background(
            lambda: self._reviews.list_reviews(product_id),
            lambda reviews: ReviewsDialog(self, title, reviews, self._reviews.average_rating(reviews)),
            name="reviews-load",
        )

    def _buy_now(self, product: Product) -> None:
        if self._auth.snapshot().is_authenticated:
            self._add_to_cart(product)
            return
        GuestCheckoutDialog(self, product, self._submit_guest_order)

    def _submit_guest_order(self, request: GuestCheckoutRequest) -> None:
        self.show_status("Placing your order...")
        self.run_in_background(
            lambda: self._checkout.guest_checkout(request),
            self._on_guest_order,
            name="guest-checkout",
        )

    def _on_guest_order(self, result: ServiceResult[Order]) -> None:
        if result.success and result.data is not None:
            self.show_success(
                f"Order #{result.data.short_id} placed. "
                f"Total {format_money(result.data.total_amount, self._currency)}, cash on delivery."
            )
        else:
            self.show_error(result.error)


class ReviewsDialog(ctk.CTkToplevel):
    """Read-only list of reviews, newest first, under the average rating."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        title: str,
        reviews: list[Review],
        average: Optional[Decimal],
    ) -> None:
        super().__init__(parent)
        self.title(title)
        self.geometry("460x560")

        summary = (
            f"{average} / 5 from {len(reviews)} review{'s' if len(reviews) != 1 else ''}"
            if average is not None else "No reviews yet."
        )
        ctk.CTkLabel(
            self, text=summary, font=FONT_CARD_TITLE, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))

        body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=PADDING_MD, pady=(0, PADDING_MD))
        for review in reviews:
            entry = ctk.CTkFrame(body, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
            entry.pack(fill="x", pady=(0, PADDING_SM))
            heading = f"{'★' * review.rating}{'☆' * (5 - review.rating)}  {review.title}"
            ctk.CTkLabel(
                entry, text=heading, font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
            ).pack(fill="x", padx=PADDING_SM, pady=(PADDING_SM, 0))
            ctk.CTkLabel(
                entry, text=review.comment, font=FONT_SMALL, text_color=TEXT_SECONDARY,
                anchor="w", justify="left", wraplength=380,
            ).pack(fill="x", padx=PADDING_SM)
            if review.is_verified_purchase:
                ctk.CTkLabel(
                    entry, text="Verified purchase", font=FONT_SMALL, text_color=OFFER_TEXT, anchor="w",
                ).pack(fill="x", padx=PADDING_SM, pady=(0, PADDING_SM))

        self.transient(parent.winfo_toplevel())


class GuestCheckoutDialog(ctk.CTkToplevel):
    """Modal form collecting a guest's contact and delivery details."""

    _FIELDS: tuple[tuple[str, str], ...] = (
        ("full_name", "Full name"),
        ("email", "Email (for confirmation, optional)"),
        ("phone", "Phone"),
        ("address_line_1", "Address line 1"),
        ("address_line_2", "Address line 2 (optional)"),
        ("city", "City"),
        ("state", "State"),
        ("postal_code", "Postal code"),
        ("quantity", "Quantity"),
    )

    def __init__(
        self,
        parent: ctk.CTkFrame,
        product: Product,
        on_submit: Callable[[GuestCheckoutRequest], None],
    ) -> None:
        super().__init__(parent)
        self.title(f"Buy {product.name}")
        self.geometry("420x620")
        self._product = product
        self._on_submit = on_submit
        self._entries: dict[str, ctk.CTkEntry] = {}

        body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=PADDING_MD, pady=PADDING_MD)
        for key, label in self._FIELDS:
            ctk.CTkLabel(body, text=label, font=FONT_SMALL, anchor="w").pack(fill="x", pady=(PADDING_SM, 2))
            entry = ctk.CTkEntry(body, height=INPUT_HEIGHT)
            entry.pack(fill="x")
            self._entries[key] = entry
        self._entries["quantity"].insert(0, "1")

        self._error_label = ctk.CTkLabel(body, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=360)
        self._error_label.pack(fill="x", pady=PADDING_SM)
        ctk.CTkButton(
            body, text="Place Order (Cash on Delivery)", font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY, hover_color=ACCENT_HOVER, command=self._submit,
        ).pack(fill="x", pady=PADDING_SM)

        self.transient(parent.winfo_toplevel())
        self.after(100, self.grab_set)

    def _value(self, key: str) -> str:
        return self._entries[key].get().strip()

    def _submit(self) -> None:
        try:
            quantity = int(self._value("quantity") or "1")
            request = GuestCheckoutRequest(
                full_name=self._value("full_name"),
                email=self._value("email") or None,
                phone=self._value("phone"),
                address=DeliveryAddress(
                    address_line_1=self._value("address_line_1"),
                    address_line_2=self._value("address_line_2") or None,
                    city=self._value("city"),
                    state=self._value("state"),
                    postal_code=self._value("postal_code"),
                ),
                lines=[CheckoutLine(product_id=self._product.id, quantity=quantity)],
            )
        except ValidationError as exc:
            missing = sorted({str(err["loc"][-1]).replace("_", " ") for err in exc.errors()})
            self._error_label.configure(text=f"Please check: {', '.join(missing)}.")
            return
        except ValueError:
            self._error_label.configure(text="Quantity must be a whole number.")
            return

        self._on_submit(request)
        self.destroy()
