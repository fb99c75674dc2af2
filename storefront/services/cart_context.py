"""
Cart Context.

Server-backed cart of the signed-in user.  Every mutation writes to the
backend and then re-fetches the whole cart; local state is never patched
in place, so the snapshot always matches what the backend holds.  There
is no guest cart: guests buy through guest checkout instead.
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Callable, Optional

from storefront.logger import StructuredLogger
from storefront.models.auth_models import AuthSnapshot
from storefront.models.cart import CartItem
from storefront.models.service_models import ServiceResult
from storefront.repositories.cart_repository import CartRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService
from storefront.services.task_queue import TaskQueue

CartListener = Callable[[list[CartItem]], None]

_AUTH_REQUIRED = "Please sign in to add items to your cart."


class CartContext(BaseService):
    """Per-user cart scoped by the ``AuthContext`` identity.

    Parameters
    ----------
    auth:
        Source of the current identity.
    repo:
        Cart data access.
    tasks:
        Queue used for fetches triggered from auth callbacks.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        auth: AuthContext,
        repo: CartRepository,
        tasks: TaskQueue,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._auth = auth
        self._repo = repo
        self._tasks = tasks

        self._lock: threading.RLock = threading.RLock()
        self._items: list[CartItem] = []
        self._user_id: Optional[str] = None
        self._listeners: list[CartListener] = []
        self._detach_auth: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def attach(self) -> None:
        """Start following the auth identity.  No-op when already attached."""
        if self._detach_auth is not None:
            return
        self._detach_auth = self._auth.add_listener(self._on_auth_change)
        self._on_auth_change(self._auth.snapshot())

    def detach(self) -> None:
        if self._detach_auth is not None:
            self._detach_auth()
            self._detach_auth = None
        with self._lock:
            self._listeners.clear()

    def add_listener(self, listener: CartListener) -> Callable[[], None]:
        """Call *listener* with the item list after every refresh or clear."""
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _remove

    def _on_auth_change(self, snapshot: AuthSnapshot) -> None:
        # May run inside the backend's auth callback: defer the fetch.
        new_user_id = snapshot.user.id if snapshot.user is not None else None
        with self._lock:
            if new_user_id == self._user_id:
                return
            self._user_id = new_user_id
            self._items = []
        self._notify()
        if new_user_id is not None:
            self._tasks.defer(self.refresh_cart)

    def _notify(self) -> None:
        items = self.items
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(items)
            except Exception as exc:
                self._logger.error("Cart listener failed: %s", exc, exc_info=True)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[CartItem]:
        with self._lock:
            return list(self._items)

    @property
    def cart_count(self) -> int:
        with self._lock:
            return sum(item.quantity for item in self._items)

    def get_total_amount(self) -> Decimal:
        """Sum of price times quantity over the current snapshot.  No backend call."""
        with self._lock:
            return sum((item.line_total for item in self._items), Decimal("0"))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def refresh_cart(self) -> ServiceResult[list[CartItem]]:
        """Re-fetch the cart for the current user."""
        user_id = self._current_user_id()
        if user_id is None:
            with self._lock:
                self._user_id = None
                self._items = []
            self._notify()
            return ServiceResult(success=True, data=[])

        try:
            items = self._repo.list_for_user(user_id)
        except Exception as exc:
            self._logger.error("Failed to fetch cart for %s: %s", user_id, exc)
            return ServiceResult(
                success=False, error="Could not load your cart.", status_code=500,
            )

        if self._current_user_id() != user_id:
            # Identity changed while the fetch was in flight.
            return ServiceResult(success=True, data=self.items)
        with self._lock:
            self._user_id = user_id
            self._items = items
        self._notify()
        return ServiceResult(success=True, data=items)

    def add_to_cart(self, product_id: str, quantity: int = 1) -> ServiceResult[list[CartItem]]:
        """Add *quantity* of *product_id*, merging into an existing row."""
        user_id = self._current_user_id()
        if user_id is None:
            return ServiceResult(success=False, error=_AUTH_REQUIRED, status_code=401)
        if quantity < 1:
            return ServiceResult(
                success=False, error="Quantity must be at least 1.", status_code=400,
            )

        try:
            existing = self._repo.find(user_id, product_id)
            if existing is not None:
                self._repo.set_quantity(user_id, existing.id, existing.quantity + quantity)
            else:
                self._repo.insert(user_id, product_id, quantity)
        except Exception as exc:
            self._logger.error(
                "add_to_cart failed for product %s: %s", product_id, exc,
            )
            return ServiceResult(
                success=False, error="Could not add the item to your cart.", status_code=500,
            )

        self._logger.info(
            "Added to cart", extra={"product_id": product_id, "quantity": quantity},
        )
        return self.refresh_cart()

    def update_cart_item_quantity(
        self, cart_item_id: str, quantity: int,
    ) -> ServiceResult[list[CartItem]]:
        """Set a row's quantity.  Zero or less is rejected, never a delete."""
        user_id = self._current_user_id()
        if user_id is None:
            return ServiceResult(success=False, error=_AUTH_REQUIRED, status_code=401)
        if quantity < 1:
            return ServiceResult(
                success=False,
                error="Quantity must be at least 1. Use remove to delete the item.",
                status_code=400,
            )

        try:
            self._repo.set_quantity(user_id, cart_item_id, quantity)
        except Exception as exc:
            self._logger.error("Quantity update failed for %s: %s", cart_item_id, exc)
            return ServiceResult(
                success=False, error="Could not update the quantity.", status_code=500,
            )
        return self.refresh_cart()

    def remove_from_cart(self, cart_item_id: str) -> ServiceResult[list[CartItem]]:
        user_id = self._current_user_id()
        if user_id is None:
            return ServiceResult(success=False, error=_AUTH_REQUIRED, status_code=401)

        try:
            self._repo.delete(user_id, cart_item_id)
        except Exception as exc:
            self._logger.error("Remove from cart failed for %s: %s", cart_item_id, exc)
            return ServiceResult(
                success=False, error="Could not remove the item.", status_code=500,
            )
        return self.refresh_cart()

    def clear_cart(self) -> ServiceResult[list[CartItem]]:
        """Delete every row of the current user's cart."""
        user_id = self._current_user_id()
        if user_id is None:
            return ServiceResult(success=False, error=_AUTH_REQUIRED, status_code=401)

        try:
            self._repo.delete_all(user_id)
        except Exception as exc:
            self._logger.error("Clear cart failed for %s: %s", user_id, exc)
            return ServiceResult(
                success=False, error="Could not clear your cart.", status_code=500,
            )
        return self.refresh_cart()

    def _current_user_id(self) -> Optional[str]:
        snapshot = self._auth.snapshot()
        if not snapshot.is_authenticated or snapshot.user is None:
            return None
        return snapshot.user.id
