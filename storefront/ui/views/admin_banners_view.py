"""Admin Banners View: home-page hero banners, publish toggle and image."""

from __future__ import annotations

from pathlib import Path
from tkinter import filedialog

import customtkinter as ctk

from storefront.logger import StructuredLogger
from storefront.models.content import Banner, BannerUpdate
from storefront.models.service_models import ServiceResult
from storefront.services.banner_service import BannerService
from storefront.ui.theme import (
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_CARD_TITLE,
    FONT_SMALL,
    INPUT_HEIGHT,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from storefront.ui.view_base import BaseView


class AdminBannersView(BaseView):
    """Edit banner copy, publish state and artwork."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        banners: BannerService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, title="Manage Banners", logger=logger)
        self._banners = banners

        self._list = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._list.pack(fill="both", expand=True, padx=PADDING_LG, pady=(PADDING_SM, PADDING_LG))

    def on_show(self) -> None:
        self.run_in_background(self._banners.list_all, self._render, name="admin-banners")

    def _render(self, result: ServiceResult[list[Banner]]) -> None:
        for child in self._list.winfo_children():
            child.destroy()
        if not result.success:
            self.show_error(result.error)
            return
        banners = result.data or []
        if not banners:
            ctk.CTkLabel(self._list, text="No banners configured.", font=FONT_BODY, text_color=TEXT_SECONDARY).pack(
                pady=PADDING_LG,
            )
            return
        for banner in banners:
            self._banner_card(banner)

    def _banner_card(self, banner: Banner) -> None:
        card = ctk.CTkFrame(self._list, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        card.pack(fill="x", pady=4)

        header = ctk.CTkFrame(card, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_MD, pady=(PADDING_SM, 0))
        ctk.CTkLabel(
            header, text=f"#{banner.display_order}  {banner.title}", font=FONT_CARD_TITLE,
            text_color=TEXT_PRIMARY,
        ).pack(side="left")
        published = ctk.CTkSwitch(
            header, text="Published",
            command=lambda: self._save(banner.id, BannerUpdate(is_published=bool(published.get()))),
        )
        if banner.is_published:
            published.select()
        published.pack(side="right")

        title = ctk.CTkEntry(card, height=INPUT_HEIGHT)
        title.insert(0, banner.title)
        title.pack(fill="x", padx=PADDING_MD, pady=(PADDING_SM, 2))
        subtitle = ctk.CTkEntry(card, height=INPUT_HEIGHT, placeholder_text="Subtitle")
        if banner.subtitle:
            subtitle.insert(0, banner.subtitle)
        subtitle.pack(fill="x", padx=PADDING_MD)

        image_text = banner.image_url or "No image"
        ctk.CTkLabel(card, text=image_text, font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
            fill="x", padx=PADDING_MD, pady=(PADDING_SM, 0),
        )

        actions = ctk.CTkFrame(card, fg_color="transparent")
        actions.pack(fill="x", padx=PADDING_MD, pady=PADDING_SM)
        ctk.CTkButton(
            actions, text="Save Text", width=100,
            command=lambda: self._save(
                banner.id,
                BannerUpdate(title=title.get().strip() or None, subtitle=subtitle.get().strip() or None),
            ),
        ).pack(side="left")
        ctk.CTkButton(
            actions, text="Replace Image", width=120, command=lambda: self._replace_image(banner),
        ).pack(side="left", padx=PADDING_SM)

    def _save(self, banner_id: str, update: BannerUpdate) -> None:
        self.run_in_background(
            lambda: self._banners.update_banner(banner_id, update), self._on_saved, name="banner-save",
        )

    def _replace_image(self, banner: Banner) -> None:
        selected = filedialog.askopenfilename(
            title="Choose banner image", filetypes=[("Images", "*.png *.jpg *.jpeg *.webp")],
        )
        if not selected:
            return
        path = Path(selected)
        self.show_status(f"Uploading {path.name}...")
        self.run_in_background(
            lambda: self._banners.upload_banner_image(banner.id, path), self._on_saved, name="banner-image",
        )

    def _on_saved(self, result: ServiceResult[Banner]) -> None:
        if not result.success:
            self.show_error(result.error)
            return
        self.show_success("Banner updated.")
        self.on_show()
