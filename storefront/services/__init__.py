"""
Business Logic Services Package.

Services depend on the Repository layer for data access and on the
``AuthContext`` for the current identity.

The ``create_services()`` factory wires every repository and service
together, returning a typed dict that the UI layer can consume without
knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from storefront.backend import BackendClient
from storefront.config import AppConfig
from storefront.logger import get_logger
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.content_repository import (
    BannerRepository,
    NotificationRepository,
    ReviewRepository,
)
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.account_service import AccountService
from storefront.services.auth_context import AuthContext
from storefront.services.banner_service import BannerService
from storefront.services.cart_context import CartContext
from storefront.services.checkout_service import CheckoutService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.review_service import ReviewService
from storefront.services.task_queue import TaskQueue
from storefront.services.user_admin_service import UserAdminService
from storefront.session import SessionStore


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    # --- Contexts ---
    auth: AuthContext
    cart: CartContext

    # --- Storefront ---
    product_service: ProductService
    checkout_service: CheckoutService
    order_service: OrderService
    review_service: ReviewService
    banner_service: BannerService
    account_service: AccountService

    # --- Back office ---
    notification_service: NotificationService
    user_admin_service: UserAdminService


def create_services(
    backend: BackendClient,
    config: AppConfig,
    tasks: TaskQueue,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    entry point calls it once at startup; the returned contexts are not
    yet initialised (the shell calls ``auth.init()`` and
    ``cart.attach()`` once its window exists).

    Args:
        backend: The process-wide backend client.
        config: Application configuration.
        tasks: Queue used to defer work out of backend auth callbacks.
    """
    logger = get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    profile_repo = ProfileRepository(backend=backend, logger=logger)
    product_repo = ProductRepository(backend=backend, logger=logger)
    cart_repo = CartRepository(backend=backend, logger=logger)
    order_repo = OrderRepository(backend=backend, logger=logger)
    review_repo = ReviewRepository(backend=backend, logger=logger)
    banner_repo = BannerRepository(backend=backend, logger=logger)
    notification_repo = NotificationRepository(backend=backend, logger=logger)

    # ------------------------------------------------------------------
    # 2. Contexts
    # ------------------------------------------------------------------
    auth = AuthContext(
        backend=backend,
        profiles=profile_repo,
        tasks=tasks,
        store=SessionStore(),
        logger=get_logger("auth"),
    )
    cart = CartContext(
        auth=auth,
        repo=cart_repo,
        tasks=tasks,
        logger=get_logger("cart"),
    )

    # ------------------------------------------------------------------
    # 3. Leaf services
    # ------------------------------------------------------------------
    notification_service = NotificationService(
        backend=backend,
        repo=notification_repo,
        auth=auth,
        config=config,
        logger=logger,
    )
    product_service = ProductService(
        repo=product_repo,
        backend=backend,
        auth=auth,
        config=config,
        logger=logger,
    )
    order_service = OrderService(
        auth=auth,
        orders=order_repo,
        profiles=profile_repo,
        logger=logger,
    )
    review_service = ReviewService(
        auth=auth,
        reviews=review_repo,
        orders=order_repo,
        logger=logger,
    )
    banner_service = BannerService(
        repo=banner_repo,
        backend=backend,
        auth=auth,
        config=config,
        logger=logger,
    )
    account_service = AccountService(
        auth=auth,
        profiles=profile_repo,
        backend=backend,
        config=config,
        logger=logger,
    )
    user_admin_service = UserAdminService(
        auth=auth,
        repo=profile_repo,
        logger=logger,
    )

    # ------------------------------------------------------------------
    # 4. Orchestration services
    # ------------------------------------------------------------------
    checkout_service = CheckoutService(
        auth=auth,
        cart=cart,
        products=product_repo,
        orders=order_repo,
        profiles=profile_repo,
        notifications=notification_service,
        logger=logger,
    )

    return ServiceContainer(
        auth=auth,
        cart=cart,
        product_service=product_service,
        checkout_service=checkout_service,
        order_service=order_service,
        review_service=review_service,
        banner_service=banner_service,
        account_service=account_service,
        notification_service=notification_service,
        user_admin_service=user_admin_service,
    )


__all__ = ["ServiceContainer", "create_services"]
