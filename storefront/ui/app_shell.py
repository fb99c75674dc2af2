"""Application Host Shell.

The top-level ``CTk`` window.  Unlike a login-first desktop tool the
storefront is browsable by guests, so the sidebar and content area are
always present and every route switch (and every auth snapshot) runs the
route guard:

- ``LOADING``: a loading placeholder, never protected content.
- ``REDIRECT_LOGIN``: the login view in the content area.
- ``DENIED``: the login view with an "admin privileges required" notice.
- ``ALLOW``: the route's cached frame.

Auth and cart listeners fire on background threads; the shell marshals
them onto the Tk loop with ``after(0, ...)``.  All dependencies are
injected; the shell contains no business logic.
"""

from __future__ import annotations

from typing import Callable, Optional, assert_never

import customtkinter as ctk

from storefront import __version__ as _APP_VERSION
from storefront.access import evaluate_route
from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.auth_models import AuthSnapshot
from storefront.models.cart import CartItem
from storefront.models.enums import GuardOutcome
from storefront.services import ServiceContainer
from storefront.services.task_queue import ThreadTaskQueue
from storefront.ui.login_view import LoginView
from storefront.ui.route_registry import RouteRegistry
from storefront.ui.sidebar import SidebarNav
from storefront.ui.theme import (
    CONTENT_BG,
    FONT_BODY,
    FONT_SMALL,
    MAIN_WINDOW_HEIGHT,
    MAIN_WINDOW_WIDTH,
    MIN_WINDOW_HEIGHT,
    MIN_WINDOW_WIDTH,
    TEXT_SECONDARY,
)
from storefront.ui.view_base import BaseView

_LOGIN_REQUIRED = "Please sign in to continue."
_ADMIN_REQUIRED = "Admin privileges required. Sign in with an administrator account."


class AppShell(ctk.CTk):
    """Host Shell: the main application window.

    Lifecycle
    ---------
    1. On boot: builds sidebar and content, initialises the auth context
       and attaches the cart, then opens the default route.
    2. Route switching: guard first, then cached frames (lazy creation).
    3. Auth changes: the sidebar is rebuilt and the current route is
       re-guarded, so signing out from an admin screen swaps it for the
       login view immediately.
    4. Close: disposes the auth context, detaches the cart and stops the
       task queue before destroying the window.

    Parameters
    ----------
    config:
        Application configuration.
    services:
        Fully-wired service container.
    registry:
        Route registry populated before shell launch.
    task_queue:
        The auth task queue, stopped on close.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        config: AppConfig,
        services: ServiceContainer,
        registry: RouteRegistry,
        task_queue: ThreadTaskQueue,
        logger: StructuredLogger,
    ) -> None:
        super().__init__()

        self._config = config
        self._services = services
        self._registry = registry
        self._task_queue = task_queue
        self._logger = logger
        self._auth = services["auth"]
        self._cart = services["cart"]

        self._route_frames: dict[str, ctk.CTkFrame] = {}
        self._current_route_id: Optional[str] = None
        self._visible_frame: Optional[ctk.CTkFrame] = None
        self._guard_frame: Optional[ctk.CTkFrame] = None
        self._guard_outcome: Optional[GuardOutcome] = None
        self._last_user_id: Optional[str] = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._closing = False

        self.title(f"{config.STORE_NAME} v{_APP_VERSION}")
        ctk.set_appearance_mode("light")
        ctk.set_default_color_theme("blue")
        self.geometry(f"{MAIN_WINDOW_WIDTH}x{MAIN_WINDOW_HEIGHT}")
        self.minsize(MIN_WINDOW_WIDTH, MIN_WINDOW_HEIGHT)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self._build_layout()

        self._unsubscribers.append(self._auth.add_listener(self._on_auth_snapshot))
        self._unsubscribers.append(self._cart.add_listener(self._on_cart_change))
        self._auth.init()
        self._cart.attach()

        self._apply_snapshot(self._auth.snapshot())
        self.show_route(self._registry.default_route_id)

    # ==================================================================
    # Layout
    # ==================================================================

    def _build_layout(self) -> None:
        self._sidebar = SidebarNav(
            parent=self,
            store_name=self._config.STORE_NAME,
            on_route_selected=self.show_route,
            on_sign_in=self.show_sign_in,
            on_sign_out=self._handle_sign_out,
            logger=self._logger,
        )
        self._sidebar.pack(side="left", fill="y")

        self._content_container = ctk.CTkFrame(self, fg_color=CONTENT_BG)
        self._content_container.pack(side="top", fill="both", expand=True)

        self._footer = ctk.CTkLabel(
            self, text=self._config.STORE_TAGLINE, font=FONT_SMALL,
            text_color=TEXT_SECONDARY, anchor="e",
        )
        self._footer.pack(side="bottom", fill="x", padx=12, pady=4)

    # ==================================================================
    # Routing
    # ==================================================================

    def show_route(self, route_id: str) -> None:
        """Open *route_id*, subject to its guard."""
        try:
            entry = self._registry.get_route(route_id)
        except KeyError:
            self._logger.error("Cannot switch to unregistered route: %s", route_id)
            return

        self._current_route_id = route_id
        self._sidebar.set_active(route_id)
        outcome = evaluate_route(self._auth.snapshot(), entry.access)
        self._render(outcome)
        self._logger.debug("Route %s -> %s", route_id, outcome)

    def _render(self, outcome: GuardOutcome) -> None:
        match outcome:
            case GuardOutcome.ALLOW:
                self._show_route_frame()
            case GuardOutcome.LOADING:
                self._show_guard_frame(outcome, self._build_loading_placeholder)
            case GuardOutcome.REDIRECT_LOGIN:
                self._show_guard_frame(outcome, lambda: self._build_login(_LOGIN_REQUIRED))
            case GuardOutcome.DENIED:
                self._show_guard_frame(outcome, lambda: self._build_login(_ADMIN_REQUIRED))
            case _:
                assert_never(outcome)

    def _show_route_frame(self) -> None:
        route_id = self._current_route_id
        if route_id is None:
            return
        self._clear_guard_frame()

        if route_id not in self._route_frames:
            entry = self._registry.get_route(route_id)
            self._route_frames[route_id] = entry.factory(self._content_container)
        frame = self._route_frames[route_id]

        if self._visible_frame is not frame:
            if self._visible_frame is not None:
                self._visible_frame.pack_forget()
            frame.pack(fill="both", expand=True)
            self._visible_frame = frame
        if isinstance(frame, BaseView):
            frame.on_show()

    def _show_guard_frame(
        self,
        outcome: GuardOutcome,
        builder: Callable[[], ctk.CTkFrame],
    ) -> None:
        if self._visible_frame is not None:
            self._visible_frame.pack_forget()
            self._visible_frame = None
        if self._guard_frame is not None and self._guard_outcome == outcome:
            return
        self._clear_guard_frame()
        self._guard_frame = builder()
        self._guard_frame.pack(fill="both", expand=True)
        self._guard_outcome = outcome

    def _clear_guard_frame(self) -> None:
        if self._guard_frame is not None:
            self._guard_frame.destroy()
            self._guard_frame = None
            self._guard_outcome = None

    def _build_loading_placeholder(self) -> ctk.CTkFrame:
        frame = ctk.CTkFrame(self._content_container, fg_color=CONTENT_BG)
        ctk.CTkLabel(
            frame, text="Loading your account...", font=FONT_BODY, text_color=TEXT_SECONDARY,
        ).place(relx=0.5, rely=0.5, anchor="center")
        return frame

    def _build_login(self, message: Optional[str]) -> ctk.CTkFrame:
        return LoginView(
            parent=self._content_container,
            auth=self._auth,
            account_service=self._services["account_service"],
            logger=self._logger,
            message=message,
            on_cancel=lambda: self.show_route(self._registry.default_route_id),
        )

    def show_sign_in(self) -> None:
        """Sidebar "Sign In" for guests: the login view without a guard notice."""
        self._current_route_id = None
        self._sidebar.set_active("")
        self._show_guard_frame(GuardOutcome.REDIRECT_LOGIN, lambda: self._build_login(None))

    # ==================================================================
    # Auth and cart listeners
    # ==================================================================

    def _on_auth_snapshot(self, snapshot: AuthSnapshot) -> None:
        # Called from backend or worker threads.
        self._schedule(lambda: self._apply_snapshot(snapshot))

    def _on_cart_change(self, items: list[CartItem]) -> None:
        count = sum(item.quantity for item in items)
        self._schedule(lambda: self._sidebar.set_cart_count(count))

    def _schedule(self, callback: Callable[[], None]) -> None:
        if self._closing:
            return
        try:
            self.after(0, callback)
        except RuntimeError:
            # Main loop already gone (window closing).
            pass

    def _apply_snapshot(self, snapshot: AuthSnapshot) -> None:
        if self._closing:
            return
        user_id = snapshot.user.id if snapshot.user else None
        if user_id != self._last_user_id:
            # Per-user screens must not outlive their user.
            self._drop_route_frames()
            self._last_user_id = user_id

        self._sidebar.set_identity(snapshot)
        self._sidebar.set_routes(self._registry.get_routes_for(snapshot))

        if self._current_route_id is not None:
            self.show_route(self._current_route_id)
        elif snapshot.is_authenticated and not snapshot.is_loading:
            # Signed in from the sidebar's login view.
            self.show_route(self._registry.default_route_id)

    def _drop_route_frames(self) -> None:
        for frame in self._route_frames.values():
            frame.destroy()
        self._route_frames.clear()
        self._visible_frame = None

    def _handle_sign_out(self) -> None:
        self._auth.sign_out()
        self.show_route(self._registry.default_route_id)

    # ==================================================================
    # Window close
    # ==================================================================

    def _on_close(self) -> None:
        """Release subscriptions and stop the task queue before destroying."""
        self._closing = True
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._cart.detach()
        self._auth.dispose()
        self._task_queue.stop()
        self.destroy()
