"""Sidebar Navigation Component.

Displays the store brand, the visible routes, who is signed in, the cart
count and a sign-in or sign-out button.  Follows the **Thin UI** rule:
zero business logic; all actions are delegated via injected callbacks.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from storefront.logger import StructuredLogger
from storefront.models.auth_models import AuthSnapshot
from storefront.ui.route_registry import RouteEntry
from storefront.ui.theme import (
    ACCENT_PRIMARY,
    FONT_BODY,
    FONT_BRAND,
    FONT_SIDEBAR,
    FONT_SIDEBAR_ACTIVE,
    FONT_SMALL,
    PADDING_MD,
    PADDING_SM,
    SIDEBAR_ACTIVE,
    SIDEBAR_BG,
    SIDEBAR_HOVER,
    SIDEBAR_TEXT,
    SIDEBAR_WIDTH,
    SIGN_OUT_HOVER,
    SIGN_OUT_TEXT,
    TEXT_LIGHT,
)

_AVATAR_SIZE: int = 40


class _RouteButton(ctk.CTkButton):
    """Clickable sidebar entry for a single route."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        entry: RouteEntry,
        on_click: Callable[[str], None],
    ) -> None:
        self._route_id = entry.route_id
        self._label = entry.display_name
        self._icon = entry.icon
        super().__init__(
            parent,
            text=f"  {entry.icon}   {entry.display_name}",
            anchor="w",
            font=FONT_SIDEBAR,
            text_color=SIDEBAR_TEXT,
            fg_color="transparent",
            hover_color=SIDEBAR_HOVER,
            height=40,
            corner_radius=6,
            command=lambda: on_click(self._route_id),
        )

    def set_active(self, active: bool) -> None:
        if active:
            self.configure(fg_color=SIDEBAR_ACTIVE, font=FONT_SIDEBAR_ACTIVE)
        else:
            self.configure(fg_color="transparent", font=FONT_SIDEBAR)

    def set_badge(self, count: int) -> None:
        suffix = f"  ({count})" if count else ""
        self.configure(text=f"  {self._icon}   {self._label}{suffix}")


class SidebarNav(ctk.CTkFrame):
    """Sidebar navigation panel for the shell.

    Parameters
    ----------
    parent:
        The root window.
    store_name:
        Brand shown at the top.
    on_route_selected:
        Called with the ``route_id`` when a route button is clicked.
    on_sign_in:
        Called when a guest clicks Sign In.
    on_sign_out:
        Called when a signed-in user clicks Sign Out.
    logger:
        Structured logger instance.
    """

    CART_ROUTE_ID: str = "cart"

    def __init__(
        self,
        parent: ctk.CTk,
        store_name: str,
        on_route_selected: Callable[[str], None],
        on_sign_in: Callable[[], None],
        on_sign_out: Callable[[], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, width=SIDEBAR_WIDTH, fg_color=SIDEBAR_BG)
        self.pack_propagate(False)

        self._store_name = store_name
        self._on_route_selected = on_route_selected
        self._on_sign_in = on_sign_in
        self._on_sign_out = on_sign_out
        self._logger = logger

        self._buttons: dict[str, _RouteButton] = {}
        self._active_route_id: Optional[str] = None
        self._cart_count: int = 0

        self._build_ui()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_routes(self, entries: list[RouteEntry]) -> None:
        """Replace the route buttons, keeping the active highlight."""
        for button in self._buttons.values():
            button.destroy()
        self._buttons.clear()

        for entry in entries:
            button = _RouteButton(self._routes_frame, entry, self._on_route_selected)
            button.pack(fill="x", padx=PADDING_SM, pady=2)
            self._buttons[entry.route_id] = button

        if self._active_route_id in self._buttons:
            self._buttons[self._active_route_id].set_active(True)
        self.set_cart_count(self._cart_count)

    def set_active(self, route_id: str) -> None:
        if self._active_route_id and self._active_route_id in self._buttons:
            self._buttons[self._active_route_id].set_active(False)
        if route_id in self._buttons:
            self._buttons[route_id].set_active(True)
        self._active_route_id = route_id

    def set_identity(self, snapshot: AuthSnapshot) -> None:
        """Show who is signed in and swap the sign-in/out button."""
        name = snapshot.display_name
        self._avatar_label.configure(text=self._get_initials(name))
        self._name_label.configure(text=name)
        if snapshot.is_loading:
            subtitle = "Loading..."
        elif snapshot.is_admin:
            subtitle = "Administrator"
        elif snapshot.is_authenticated:
            subtitle = snapshot.user.email if snapshot.user and snapshot.user.email else "Customer"
        else:
            subtitle = "Browsing as guest"
        self._role_label.configure(text=subtitle)

        if snapshot.is_authenticated:
            self._auth_button.configure(
                text="  ⏻   Sign Out",
                text_color=SIGN_OUT_TEXT,
                hover_color=SIGN_OUT_HOVER,
                command=self._on_sign_out,
            )
        else:
            self._auth_button.configure(
                text="  →   Sign In",
                text_color=SIDEBAR_TEXT,
                hover_color=SIDEBAR_HOVER,
                command=self._on_sign_in,
            )

    def set_cart_count(self, count: int) -> None:
        self._cart_count = count
        button = self._buttons.get(self.CART_ROUTE_ID)
        if button is not None:
            button.set_badge(count)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        ctk.CTkLabel(
            self,
            text=self._store_name,
            font=FONT_BRAND,
            text_color=TEXT_LIGHT,
            anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))

        # --- User info: avatar + name + role ---
        row = ctk.CTkFrame(self, fg_color="transparent")
        row.pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_SM))

        avatar = ctk.CTkFrame(
            row,
            width=_AVATAR_SIZE,
            height=_AVATAR_SIZE,
            corner_radius=_AVATAR_SIZE // 2,
            fg_color=ACCENT_PRIMARY,
        )
        avatar.pack(side="left", padx=(0, 10))
        avatar.pack_propagate(False)
        self._avatar_label = ctk.CTkLabel(
            avatar, text="?", font=FONT_SIDEBAR_ACTIVE, text_color=TEXT_LIGHT,
        )
        self._avatar_label.place(relx=0.5, rely=0.5, anchor="center")

        text_frame = ctk.CTkFrame(row, fg_color="transparent")
        text_frame.pack(side="left", fill="x", expand=True)
        self._name_label = ctk.CTkLabel(
            text_frame, text="Guest", font=FONT_SIDEBAR_ACTIVE,
            text_color=TEXT_LIGHT, anchor="w",
        )
        self._name_label.pack(fill="x")
        self._role_label = ctk.CTkLabel(
            text_frame, text="", font=FONT_SMALL, text_color=SIDEBAR_TEXT, anchor="w",
        )
        self._role_label.pack(fill="x")

        ctk.CTkFrame(self, height=1, fg_color=SIDEBAR_HOVER).pack(
            fill="x", padx=PADDING_MD, pady=PADDING_SM,
        )

        self._routes_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._routes_frame.pack(fill="both", expand=True, pady=PADDING_SM)

        # --- Bottom: sign in / sign out ---
        bottom_frame = ctk.CTkFrame(self, fg_color="transparent")
        bottom_frame.pack(fill="x", padx=PADDING_SM, pady=PADDING_SM, side="bottom")
        self._auth_button = ctk.CTkButton(
            bottom_frame,
            text="  →   Sign In",
            font=FONT_BODY,
            fg_color="transparent",
            hover_color=SIDEBAR_HOVER,
            text_color=SIDEBAR_TEXT,
            anchor="w",
            height=36,
            corner_radius=6,
            command=self._on_sign_in,
        )
        self._auth_button.pack(fill="x")
        ctk.CTkFrame(self, height=1, fg_color=SIDEBAR_HOVER).pack(
            fill="x", padx=PADDING_MD, side="bottom",
        )

    @staticmethod
    def _get_initials(full_name: str) -> str:
        """Up to two uppercase initials from a name or email."""
        parts = full_name.split("@")[0].replace(".", " ").strip().split()
        if len(parts) >= 2:
            return (parts[0][0] + parts[-1][0]).upper()
        if parts:
            return parts[0][0].upper()
        return "?"
