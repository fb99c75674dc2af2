"""
Review Service.

Product reviews and brand reviews (``product_id`` left empty).  A review
is flagged as a verified purchase when the author has an order that
contains the reviewed product, or any order at all for a brand review.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import ValidationError

from storefront.access import access_denied
from storefront.logger import StructuredLogger
from storefront.models.content import Review, ReviewInput
from storefront.models.enums import RouteAccess
from storefront.models.service_models import ServiceResult
from storefront.repositories.content_repository import ReviewRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService


class ReviewService(BaseService):
    """Service layer for customer reviews."""

    def __init__(
        self,
        auth: AuthContext,
        reviews: ReviewRepository,
        orders: OrderRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._auth = auth
        self._reviews = reviews
        self._orders = orders

    def submit_review(
        self,
        rating: int,
        title: str,
        comment: str,
        product_id: Optional[str] = None,
    ) -> ServiceResult[Review]:
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.AUTHENTICATED)
        if denied is not None:
            return denied
        assert snapshot.user is not None

        title, comment = (title or "").strip(), (comment or "").strip()
        if not title or not comment:
            return ServiceResult(
                success=False, error="Please add a title and a comment.", status_code=400,
            )
        try:
            review_input = ReviewInput(
                rating=rating, title=title, comment=comment, product_id=product_id,
            )
        except ValidationError as exc:
            message = exc.errors()[0].get("msg", "Invalid review.")
            return ServiceResult(success=False, error=str(message), status_code=400)

        verified = self._has_purchased(snapshot.user.id, product_id)
        try:
            review = self._reviews.create(snapshot.user.id, review_input, verified)
        except Exception as exc:
            self._logger.error("Review insert failed: %s", exc)
            return ServiceResult(
                success=False, error="Could not submit your review.", status_code=500,
            )

        self._logger.info(
            "Review submitted",
            extra={"review_id": review.id, "product_id": product_id or "brand", "rating": rating},
        )
        return ServiceResult(success=True, data=review)

    def list_reviews(self, product_id: Optional[str] = None) -> list[Review]:
        """Reviews of one product, or brand reviews when *product_id* is ``None``."""
        return self._reviews.list_for_product(product_id)

    def list_my_reviews(self) -> list[Review]:
        snapshot = self._auth.snapshot()
        if snapshot.user is None:
            return []
        return self._reviews.list_for_user(snapshot.user.id)

    @staticmethod
    def average_rating(reviews: list[Review]) -> Optional[Decimal]:
        """Mean rating to one decimal place, ``None`` with no reviews."""
        if not reviews:
            return None
        mean = Decimal(sum(r.rating for r in reviews)) / Decimal(len(reviews))
        return mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    def _has_purchased(self, user_id: str, product_id: Optional[str]) -> bool:
        try:
            orders = self._orders.list_for_user(user_id)
        except Exception as exc:
            self._logger.warning("Purchase check failed for %s: %s", user_id, exc)
            return False
        if product_id is None:
            return bool(orders)
        return any(
            item.product_id == product_id
            for order in orders
            for item in order.order_items
        )
