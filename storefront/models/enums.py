"""
Shared Enumerations for Storefront Models.

StrEnum values compare equal to their string equivalents, so rows read
from the backend (``role == "admin"``) validate straight into them.
"""

from __future__ import annotations

from enum import StrEnum


class UserRole(StrEnum):
    """Closed set of profile roles.

    Authorisation sites match on this exhaustively; there is no third
    role and no free-form role string anywhere in the client.
    """

    ADMIN = "admin"
    USER = "user"


class OrderStatus(StrEnum):
    """Order lifecycle as set by the back office."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ShippingStatus(StrEnum):
    """Delivery progress shown to the customer."""

    PENDING = "pending"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(StrEnum):
    """Payment options.  Only cash on delivery is accepted at checkout."""

    COD = "cod"
    ONLINE = "online"


class ProductCategory(StrEnum):
    """Catalogue categories."""

    CHICKEN = "chicken"
    RED_MEAT = "red_meat"
    CHILLI_CONDIMENTS = "chilli_condiments"
    OTHER = "other"


class AuthEvent(StrEnum):
    """Events delivered by the backend auth-change stream."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class AuthPhase(StrEnum):
    """States of the client-side auth lifecycle."""

    UNINITIALIZED = "uninitialized"
    LOADING_SESSION = "loading-session"
    PROFILE_LOADING = "authenticated-profile-loading"
    READY = "authenticated-ready"
    UNAUTHENTICATED = "unauthenticated"


class RouteAccess(StrEnum):
    """Who may open a route."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


class GuardOutcome(StrEnum):
    """What the shell should render for a guarded route."""

    LOADING = "loading"
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    DENIED = "denied"


class NotificationType(StrEnum):
    """Categories of back-office notifications."""

    NEW_ORDER = "new_order"
    NEW_USER = "new_user"
    NEW_REVIEW = "new_review"
