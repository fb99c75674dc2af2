"""
Repository Layer Package.

Data-access abstractions over the Supabase tables.  Services never call
``backend.supabase.table(...)`` directly.

Usage:
    from storefront.repositories.cart_repository import CartRepository
    from storefront.repositories.profile_repository import ProfileRepository
"""

from storefront.repositories.base_repository import BaseRepository
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.content_repository import (
    BannerRepository,
    NotificationRepository,
    ReviewRepository,
)
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.profile_repository import ProfileRepository

__all__ = [
    "BannerRepository",
    "BaseRepository",
    "CartRepository",
    "NotificationRepository",
    "OrderRepository",
    "ProductRepository",
    "ProfileRepository",
    "ReviewRepository",
]
