"""Admin Products View.

Catalogue management: every product including inactive ones, with
activate/deactivate, delete, a create/edit dialog with image upload, and
bulk import from a CSV or Excel file.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from tkinter import filedialog, messagebox
from typing import Callable, Optional

import customtkinter as ctk
from pydantic import ValidationError

from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.enums import ProductCategory
from storefront.models.product import ImageUploadResult, Product, ProductInput
from storefront.models.service_models import ServiceResult
from storefront.services.product_service import ProductService
from storefront.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
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

_IMPORT_FILETYPES = [("Product files", "*.csv *.xlsx"), ("CSV", "*.csv"), ("Excel", "*.xlsx")]
_IMAGE_FILETYPES = [("Images", "*.png *.jpg *.jpeg *.webp *.gif")]


class AdminProductsView(BaseView):
    """Back-office catalogue list."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        products: ProductService,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, title="Manage Products", logger=logger)
        self._products = products
        self._config = config

        for text, command in (
            ("Download Template", self._save_template),
            ("Import File", self._import),
            ("Add Product", lambda: self._open_editor(None)),
        ):
            ctk.CTkButton(
                self._header_actions, text=text, font=FONT_SMALL, width=120, command=command,
            ).pack(side="right", padx=(PADDING_SM, 0))

        self._list = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._list.pack(fill="both", expand=True, padx=PADDING_LG, pady=(PADDING_SM, PADDING_LG))

    def on_show(self) -> None:
        self._reload()

    def _reload(self) -> None:
        self.run_in_background(
            lambda: self._products.list_products(include_inactive=True),
            self._render,
            name="admin-products",
        )

    def _render(self, products: list[Product]) -> None:
        for child in self._list.winfo_children():
            child.destroy()
        if not products:
            ctk.CTkLabel(self._list, text="No products yet.", font=FONT_BODY, text_color=TEXT_SECONDARY).pack(
                pady=PADDING_LG,
            )
            return
        for product in products:
            self._product_row(product)

    def _product_row(self, product: Product) -> None:
        row = ctk.CTkFrame(self._list, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        row.pack(fill="x", pady=3)
        state = "" if product.is_active else "  (inactive)"
        ctk.CTkLabel(
            row,
            text=(
                f"{product.name}{state}   {format_money(product.price, self._config.CURRENCY_SYMBOL)}"
                f"   stock {product.stock_quantity}   {product.category}"
            ),
            font=FONT_BODY,
            text_color=TEXT_PRIMARY if product.is_active else TEXT_SECONDARY,
            anchor="w",
        ).pack(side="left", fill="x", expand=True, padx=PADDING_MD, pady=PADDING_SM)
        ctk.CTkButton(
            row, text="Delete", width=70, fg_color="transparent", text_color=ERROR_TEXT,
            hover_color=CONTENT_BG, command=lambda: self._delete(product),
        ).pack(side="right", padx=(0, PADDING_SM))
        ctk.CTkButton(
            row, text="Deactivate" if product.is_active else "Activate", width=90,
            command=lambda: self._toggle(product),
        ).pack(side="right", padx=(0, PADDING_SM))
        ctk.CTkButton(
            row, text="Edit", width=60, command=lambda: self._open_editor(product),
        ).pack(side="right", padx=(0, PADDING_SM))

    # ------------------------------------------------------------------
    # Row actions
    # ------------------------------------------------------------------

    def _toggle(self, product: Product) -> None:
        self.run_in_background(
            lambda: self._products.toggle_product_status(product.id), self._after_change, name="product-toggle",
        )

    def _delete(self, product: Product) -> None:
        if not messagebox.askyesno("Delete product", f"Delete '{product.name}'? This cannot be undone."):
            return
        self.run_in_background(
            lambda: self._products.delete_product(product.id), self._after_change, name="product-delete",
        )

    def _after_change(self, result: ServiceResult[object]) -> None:
        if not result.success:
            self.show_error(result.error)
            return
        self.show_success("Catalogue updated.")
        self._reload()

    def _open_editor(self, product: Optional[Product]) -> None:
        ProductEditorDialog(self, self._products, self._config, product, on_saved=self._reload)

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def _import(self) -> None:
        selected = filedialog.askopenfilename(title="Import products", filetypes=_IMPORT_FILETYPES)
        if not selected:
            return
        path = Path(selected)
        self.show_status(f"Importing {path.name}...")
        self.run_in_background(lambda: self._products.import_products(path), self._on_imported, name="import")

    def _on_imported(self, result: ServiceResult[list[Product]]) -> None:
        if not result.success:
            self.show_error(result.error)
            return
        self.show_success(f"Imported {len(result.data or [])} product(s).")
        self._reload()

    def _save_template(self) -> None:
        selected = filedialog.asksaveasfilename(
            title="Save import template",
            defaultextension=".csv",
            initialfile="product_import_template.csv",
            filetypes=[("CSV", "*.csv")],
        )
        if not selected:
            return
        result = self._products.write_import_template(Path(selected))
        if result.success:
            self.show_success(f"Template saved to {result.data}.")
        else:
            self.show_error(result.error)


class ProductEditorDialog(ctk.CTkToplevel):
    """Create or edit one product."""

    def __init__(
        self,
        owner: BaseView,
        products: ProductService,
        config: AppConfig,
        product: Optional[Product],
        on_saved: Callable[[], None],
    ) -> None:
        super().__init__(owner)
        self._owner = owner
        self._products = products
        self._config = config
        self._product = product
        self._on_saved = on_saved
        self._image_urls: list[str] = list(product.image_urls) if product else []

        self.title("Edit Product" if product else "Add Product")
        self.geometry("460x680")
        self.transient(owner.winfo_toplevel())

        form = ctk.CTkScrollableFrame(self, fg_color="transparent")
        form.pack(fill="both", expand=True, padx=PADDING_MD, pady=PADDING_MD)

        self._entries: dict[str, ctk.CTkEntry] = {}
        for key, label in (
            ("name", "Name"),
            ("price", "Price"),
            ("offer_price", "Offer price (optional)"),
            ("stock_quantity", "Stock quantity"),
            ("features", "Features (separate with |)"),
            ("ingredients", "Ingredients"),
            ("offers", "Offer text"),
        ):
            ctk.CTkLabel(form, text=label, font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
                fill="x", pady=(PADDING_SM, 2),
            )
            entry = ctk.CTkEntry(form, height=INPUT_HEIGHT)
            entry.pack(fill="x")
            self._entries[key] = entry

        ctk.CTkLabel(form, text="Category", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
            fill="x", pady=(PADDING_SM, 2),
        )
        self._category = ctk.CTkOptionMenu(form, values=[str(c) for c in ProductCategory])
        self._category.pack(fill="x")

        ctk.CTkLabel(form, text="Description", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
            fill="x", pady=(PADDING_SM, 2),
        )
        self._description = ctk.CTkTextbox(form, height=70)
        self._description.pack(fill="x")

        self._featured = ctk.CTkCheckBox(form, text="Featured on the home page")
        self._featured.pack(anchor="w", pady=(PADDING_SM, 0))
        self._active = ctk.CTkCheckBox(form, text="Active")
        self._active.pack(anchor="w", pady=(PADDING_SM, 0))

        self._images_label = ctk.CTkLabel(form, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w")
        self._images_label.pack(fill="x", pady=(PADDING_SM, 2))
        ctk.CTkButton(form, text="Add Images", command=self._add_images).pack(anchor="w")

        self._error = ctk.CTkLabel(
            form, text="", font=FONT_SMALL, text_color=ERROR_TEXT, anchor="w", justify="left", wraplength=400,
        )
        self._error.pack(fill="x", pady=(PADDING_SM, 0))
        self._save_button = ctk.CTkButton(
            form, text="Save", font=FONT_BUTTON, fg_color=ACCENT_PRIMARY, hover_color=ACCENT_HOVER,
            command=self._save,
        )
        self._save_button.pack(fill="x", pady=PADDING_SM)

        self._fill()

    def _fill(self) -> None:
        product = self._product
        if product is None:
            self._active.select()
            self._update_images_label()
            return
        values = {
            "name": product.name,
            "price": str(product.price),
            "offer_price": str(product.offer_price) if product.offer_price is not None else "",
            "stock_quantity": str(product.stock_quantity),
            "features": " | ".join(product.features),
            "ingredients": product.ingredients or "",
            "offers": product.offers or "",
        }
        for key, value in values.items():
            self._entries[key].insert(0, value)
        self._category.set(str(product.category))
        self._description.insert("1.0", product.description or "")
        if product.featured:
            self._featured.select()
        if product.is_active:
            self._active.select()
        self._update_images_label()

    def _update_images_label(self) -> None:
        self._images_label.configure(
            text=f"Images: {len(self._image_urls)} of {self._config.MAX_IMAGES_PER_PRODUCT}"
        )

    def _add_images(self) -> None:
        selected = filedialog.askopenfilenames(parent=self, title="Choose images", filetypes=_IMAGE_FILETYPES)
        if not selected:
            return
        paths = [Path(p) for p in selected]
        existing = len(self._image_urls)
        self._owner.run_in_background(
            lambda: self._products.upload_product_images(paths, existing_count=existing),
            self._on_uploaded,
            name="image-upload",
        )

    def _on_uploaded(self, result: ServiceResult[ImageUploadResult]) -> None:
        if not self.winfo_exists():
            return
        upload = result.data
        if upload is not None:
            self._image_urls.extend(upload.urls)
            self._update_images_label()
            if upload.rejected:
                self._error.configure(
                    text="\n".join(f"{name}: {reason}" for name, reason in upload.rejected.items())
                )
                return
        if not result.success:
            self._error.configure(text=result.error or "Upload failed.")
        else:
            self._error.configure(text="")

    def _build_input(self) -> Optional[ProductInput]:
        values = {key: entry.get().strip() for key, entry in self._entries.items()}
        try:
            price = Decimal(values["price"] or "0")
            offer_price = Decimal(values["offer_price"]) if values["offer_price"] else None
            stock = int(values["stock_quantity"] or "0")
        except (InvalidOperation, ValueError):
            self._error.configure(text="Price, offer price and stock must be numbers.")
            return None
        try:
            return ProductInput(
                name=values["name"],
                description=self._description.get("1.0", "end").strip() or None,
                price=price,
                offer_price=offer_price,
                category=ProductCategory(self._category.get()),
                image_url=self._image_urls[0] if self._image_urls else None,
                image_urls=self._image_urls,
                features=[f.strip() for f in values["features"].split("|") if f.strip()],
                ingredients=values["ingredients"] or None,
                offers=values["offers"] or None,
                stock_quantity=stock,
                is_active=bool(self._active.get()),
                featured=bool(self._featured.get()),
            )
        except ValidationError as exc:
            self._error.configure(
                text="; ".join(f"{err['loc'][-1]}: {err['msg']}" for err in exc.errors())
            )
            return None

    def _save(self) -> None:
        data = self._build_input()
        if data is None:
            return
        self._save_button.configure(state="disabled", text="Saving...")
        product = self._product

        def _work() -> ServiceResult[Product]:
            if product is None:
                return self._products.create_product(data)
            return self._products.update_product(product.id, data)

        self._owner.run_in_background(_work, self._on_done, name="product-save")

    def _on_done(self, result: ServiceResult[Product]) -> None:
        if not self.winfo_exists():
            return
        self._save_button.configure(state="normal", text="Save")
        if not result.success:
            self._error.configure(text=result.error or "Could not save the product.")
            return
        self._on_saved()
        self.destroy()
