"""
FreshCut Storefront Desktop Application Entry Point.

Bootstraps the dependency graph via constructor injection and launches
the CustomTkinter GUI.  Every subsystem is wired here; there are no
module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import atexit
import sys
import traceback
from typing import Optional

from storefront.backend import BackendClient
from storefront.config import get_config
from storefront.logger import StructuredLogger, get_logger
from storefront.models.enums import RouteAccess
from storefront.services import create_services
from storefront.services.task_queue import ThreadTaskQueue
from storefront.ui.app_shell import AppShell
from storefront.ui.route_registry import RouteRegistry
from storefront.ui.views.account_view import AccountView
from storefront.ui.views.admin_banners_view import AdminBannersView
from storefront.ui.views.admin_orders_view import AdminOrdersView
from storefront.ui.views.admin_products_view import AdminProductsView
from storefront.ui.views.admin_users_view import AdminUsersView
from storefront.ui.views.cart_view import CartView
from storefront.ui.views.orders_view import OrdersView
from storefront.ui.views.shop_view import ShopView


def main() -> None:
    """Application entry point: wire dependencies and launch the GUI."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting storefront...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Backend client (one per process)
    # ------------------------------------------------------------------
    backend = BackendClient(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=get_logger("backend"),
    )

    # ------------------------------------------------------------------
    # 3. Task queue for work deferred out of auth callbacks
    # ------------------------------------------------------------------
    task_queue = ThreadTaskQueue(logger=get_logger("tasks"))
    task_queue.start()
    # stop() is idempotent; the shell stops the queue on a clean close.
    atexit.register(task_queue.stop)

    # ------------------------------------------------------------------
    # 4. Service container
    # ------------------------------------------------------------------
    services = create_services(backend=backend, config=config, tasks=task_queue)

    # ------------------------------------------------------------------
    # 5. Routes
    # ------------------------------------------------------------------
    app: Optional[AppShell] = None

    def _open_sign_in() -> None:
        if app is not None:
            app.show_sign_in()

    registry = RouteRegistry(logger=get_logger("routes"))

    registry.register(
        route_id="shop",
        display_name="Shop",
        icon="\U0001F6D2",  # Shopping trolley
        factory=lambda parent: ShopView(
            parent=parent,
            products=services["product_service"],
            banners=services["banner_service"],
            reviews=services["review_service"],
            cart=services["cart"],
            checkout=services["checkout_service"],
            auth=services["auth"],
            config=config,
            on_sign_in=_open_sign_in,
            logger=get_logger("shop"),
        ),
        access=RouteAccess.PUBLIC,
        default=True,
    )
    registry.register(
        route_id="cart",
        display_name="Cart",
        icon="\U0001F9FA",  # Basket
        factory=lambda parent: CartView(
            parent=parent,
            cart=services["cart"],
            checkout=services["checkout_service"],
            auth=services["auth"],
            config=config,
            logger=get_logger("cart_view"),
        ),
        access=RouteAccess.AUTHENTICATED,
    )
    registry.register(
        route_id="orders",
        display_name="My Orders",
        icon="\U0001F4E6",  # Package
        factory=lambda parent: OrdersView(
            parent=parent,
            orders=services["order_service"],
            config=config,
            logger=get_logger("orders_view"),
        ),
        access=RouteAccess.AUTHENTICATED,
    )
    registry.register(
        route_id="account",
        display_name="Account",
        icon="\U0001F464",  # Bust in silhouette
        factory=lambda parent: AccountView(
            parent=parent,
            auth=services["auth"],
            account=services["account_service"],
            reviews=services["review_service"],
            logger=get_logger("account_view"),
        ),
        access=RouteAccess.AUTHENTICATED,
    )
    registry.register(
        route_id="admin_orders",
        display_name="Manage Orders",
        icon="\U0001F4CB",  # Clipboard
        factory=lambda parent: AdminOrdersView(
            parent=parent,
            orders=services["order_service"],
            notifications=services["notification_service"],
            config=config,
            logger=get_logger("admin_orders"),
        ),
        access=RouteAccess.ADMIN,
    )
    registry.register(
        route_id="admin_products",
        display_name="Manage Products",
        icon="\U0001F969",  # Cut of meat
        factory=lambda parent: AdminProductsView(
            parent=parent,
            products=services["product_service"],
            config=config,
            logger=get_logger("admin_products"),
        ),
        access=RouteAccess.ADMIN,
    )
    registry.register(
        route_id="admin_banners",
        display_name="Manage Banners",
        icon="\U0001F5BC",  # Framed picture
        factory=lambda parent: AdminBannersView(
            parent=parent,
            banners=services["banner_service"],
            logger=get_logger("admin_banners"),
        ),
        access=RouteAccess.ADMIN,
    )
    registry.register(
        route_id="admin_users",
        display_name="Manage Users",
        icon="\U0001F465",  # Busts in silhouette
        factory=lambda parent: AdminUsersView(
            parent=parent,
            users=services["user_admin_service"],
            auth=services["auth"],
            logger=get_logger("admin_users"),
        ),
        access=RouteAccess.ADMIN,
    )

    # ------------------------------------------------------------------
    # 6. Launch the GUI (blocks until window closes)
    # ------------------------------------------------------------------
    logger.info("Launching GUI...")
    app = AppShell(
        config=config,
        services=services,
        registry=registry,
        task_queue=task_queue,
        logger=get_logger("ui"),
    )
    try:
        app.mainloop()
    finally:
        task_queue.stop()
        logger.info("Storefront shut down.")


def _show_fatal_error(exc: BaseException) -> None:
    """Show a fatal-error dialog so double-click users get feedback.

    Plain ``tkinter.messagebox`` is used so the dialog still works when
    CustomTkinter itself failed to start.
    """
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        import tkinter
        from tkinter import messagebox

        root = tkinter.Tk()
        root.withdraw()
        messagebox.showerror(
            title="Storefront: Fatal Error",
            message=(
                "The storefront hit an unexpected error and has to close.\n\n"
                f"{type(exc).__name__}: {exc}"
            ),
            detail=detail,
        )
        root.destroy()
    except Exception:
        # Headless or missing Tcl/Tk: stderr is all that is left.
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
