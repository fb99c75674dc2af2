"""
Storefront Data Models Package.

Pydantic projections of backend rows and the DTOs exchanged between
services and views.
"""

from storefront.models.auth_models import (
    AuthErrorCode,
    AuthResult,
    AuthSnapshot,
    Identity,
    SessionInfo,
    ValidationResult,
)
from storefront.models.cart import CartItem
from storefront.models.content import (
    AdminNotification,
    Banner,
    BannerUpdate,
    Review,
    ReviewInput,
)
from storefront.models.enums import (
    AuthEvent,
    AuthPhase,
    GuardOutcome,
    NotificationType,
    OrderStatus,
    PaymentMethod,
    ProductCategory,
    RouteAccess,
    ShippingStatus,
    UserRole,
)
from storefront.models.order import (
    AdminOrderView,
    CheckoutLine,
    DeliveryAddress,
    GuestCheckoutRequest,
    Order,
    OrderItem,
    OrderStats,
    OrderStatusUpdate,
)
from storefront.models.product import (
    ImageUploadResult,
    Product,
    ProductInput,
    ProductSummary,
)
from storefront.models.profile import Profile, ProfileUpdate
from storefront.models.service_models import ServiceResult

__all__ = [
    "AdminNotification",
    "AdminOrderView",
    "AuthErrorCode",
    "AuthEvent",
    "AuthPhase",
    "AuthResult",
    "AuthSnapshot",
    "Banner",
    "BannerUpdate",
    "CartItem",
    "CheckoutLine",
    "DeliveryAddress",
    "GuardOutcome",
    "GuestCheckoutRequest",
    "Identity",
    "ImageUploadResult",
    "NotificationType",
    "Order",
    "OrderItem",
    "OrderStats",
    "OrderStatus",
    "OrderStatusUpdate",
    "PaymentMethod",
    "Product",
    "ProductCategory",
    "ProductInput",
    "ProductSummary",
    "Profile",
    "ProfileUpdate",
    "Review",
    "ReviewInput",
    "RouteAccess",
    "ServiceResult",
    "SessionInfo",
    "ShippingStatus",
    "UserRole",
    "ValidationResult",
]
