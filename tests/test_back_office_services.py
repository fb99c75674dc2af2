import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

from storefront.config import AppConfig
from storefront.models.content import AdminNotification, Banner, BannerUpdate, Review
from storefront.models.enums import NotificationType, UserRole
from storefront.models.order import Order, OrderItem
from storefront.models.profile import Profile, ProfileUpdate
from storefront.repositories.content_repository import (
    BannerRepository,
    NotificationRepository,
    ReviewRepository,
)
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.account_service import RESET_PASSWORD_FUNCTION, AccountService
from storefront.services.banner_service import BannerService
from storefront.services.notification_service import (
    ADMIN_NOTIFICATION_FUNCTION,
    ADMIN_NOTIFICATION_RPC,
    ORDER_CONFIRMATION_FUNCTION,
    NotificationService,
)
from storefront.services.review_service import ReviewService
from storefront.services.user_admin_service import UserAdminService
from tests.fakes import FakeQuery, StaticAuth, make_backend, make_logger, make_snapshot


def admin_snapshot():
    return make_snapshot("admin-1", role=UserRole.ADMIN)


class TestUserAdminService(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(admin_snapshot())
        self.repo = MagicMock(spec=ProfileRepository)
        self.repo.get_by_id.return_value = Profile(id="user-2", role=UserRole.USER)
        self.repo.update_role.return_value = Profile(id="user-2", role=UserRole.ADMIN)
        self.service = UserAdminService(auth=self.auth, repo=self.repo, logger=make_logger())

    def test_promote_user(self):
        result = self.service.update_user_role("user-2", "Admin")
        self.assertTrue(result.success)
        self.repo.update_role.assert_called_once_with("user-2", UserRole.ADMIN)

    def test_invalid_role(self):
        result = self.service.update_user_role("user-2", "superuser")
        self.assertEqual(result.status_code, 400)
        self.repo.update_role.assert_not_called()

    def test_admin_cannot_demote_self(self):
        result = self.service.update_user_role("admin-1", "user")
        self.assertEqual(result.status_code, 400)
        self.repo.update_role.assert_not_called()

    def test_unknown_user(self):
        self.repo.get_by_id.return_value = None
        self.assertEqual(self.service.update_user_role("ghost", "admin").status_code, 404)

    def test_customer_cannot_manage_users(self):
        self.auth.set_snapshot(make_snapshot("user-1"))
        self.assertEqual(self.service.list_users().status_code, 403)
        self.assertEqual(self.service.update_user_role("user-2", "admin").status_code, 403)


class TestAccountService(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(make_snapshot("user-1"))
        self.profiles = MagicMock(spec=ProfileRepository)
        self.profiles.save_details.return_value = Profile(id="user-1", full_name="Asha Rao")
        self.backend = MagicMock()
        self.service = AccountService(
            auth=self.auth,
            profiles=self.profiles,
            backend=self.backend,
            config=AppConfig(MIN_RESET_PASSWORD_LENGTH=8),
            logger=make_logger(),
        )

    def test_saved_address_needs_street_city_state_and_postcode(self):
        partial = Profile(id="user-1", address_line_1="12 MG Road", city="Pune")
        self.assertFalse(partial.has_address)
        complete = partial.model_copy(update={"state": "MH", "postal_code": "411001"})
        self.assertTrue(complete.has_address)

    def test_save_profile_strips_and_refreshes(self):
        result = self.service.save_profile(ProfileUpdate(full_name="  Asha Rao ", city=" Pune "))
        self.assertTrue(result.success)
        user_id, email, update = self.profiles.save_details.call_args.args
        self.assertEqual(user_id, "user-1")
        self.assertEqual(email, "cust@example.com")
        self.assertEqual(update.full_name, "Asha Rao")
        self.assertEqual(update.city, "Pune")
        self.assertEqual(self.auth.refresh_calls, 1)

    def test_save_profile_requires_sign_in(self):
        self.auth.set_snapshot(make_snapshot(user_id=None))
        self.assertEqual(self.service.save_profile(ProfileUpdate()).status_code, 401)

    def test_reset_password_invokes_function(self):
        result = self.service.reset_password(" Cust@Example.com ", "98450", "123456", "longenough")
        self.assertTrue(result.success)
        self.backend.invoke_function.assert_called_once_with(
            RESET_PASSWORD_FUNCTION,
            {"email": "cust@example.com", "phone": "98450", "code": "123456", "newPassword": "longenough"},
        )

    def test_reset_password_validation(self):
        self.assertEqual(self.service.reset_password("", "1", "2", "longenough").status_code, 400)
        self.assertEqual(self.service.reset_password("bad", "1", "2", "longenough").status_code, 400)
        self.assertEqual(self.service.reset_password("a@b.co", "1", "2", "short").status_code, 400)
        self.backend.invoke_function.assert_not_called()

    def test_reset_password_backend_failure(self):
        self.backend.invoke_function.side_effect = RuntimeError("invalid code")
        result = self.service.reset_password("a@b.co", "1", "2", "longenough")
        self.assertFalse(result.success)
        self.assertEqual(result.status_code, 400)


class TestNotificationService(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(admin_snapshot())
        self.backend = MagicMock()
        self.repo = MagicMock(spec=NotificationRepository)
        self.config = AppConfig(ADMIN_NOTIFICATION_EMAIL="owner@example.com")
        self.service = NotificationService(
            backend=self.backend, repo=self.repo, auth=self.auth, config=self.config, logger=make_logger(),
        )

    def test_notify_admins_records_and_emails(self):
        sent = self.service.notify_admins(
            NotificationType.NEW_ORDER, "New order #AB", "Asha placed an order", user_id="u", order_id="o",
        )
        self.assertTrue(sent)
        self.backend.call_rpc.assert_called_once_with(
            ADMIN_NOTIFICATION_RPC,
            {
                "notification_type": "new_order",
                "notification_title": "New order #AB",
                "notification_message": "Asha placed an order",
                "related_user_id": "u",
                "related_order_id": "o",
            },
        )
        name, body = self.backend.invoke_function.call_args.args
        self.assertEqual(name, ADMIN_NOTIFICATION_FUNCTION)
        self.assertEqual(body["adminEmail"], "owner@example.com")

    def test_notify_admins_is_best_effort(self):
        self.backend.call_rpc.side_effect = RuntimeError("rpc down")
        self.assertFalse(self.service.notify_admins(NotificationType.NEW_USER, "t", "m"))
        self.backend.invoke_function.assert_not_called()

    def test_order_confirmation(self):
        order = Order(
            id="o1",
            total_amount=Decimal("10.00"),
            order_items=[OrderItem(product_id="p", quantity=1, price=Decimal("10.00"))],
        )
        self.assertFalse(self.service.send_order_confirmation(None, order))
        self.assertTrue(self.service.send_order_confirmation("a@b.co", order))
        name, body = self.backend.invoke_function.call_args.args
        self.assertEqual(name, ORDER_CONFIRMATION_FUNCTION)
        self.assertEqual(body["orderData"]["id"], "o1")

        self.backend.invoke_function.side_effect = RuntimeError("smtp")
        self.assertFalse(self.service.send_order_confirmation("a@b.co", order))

    def test_inbox_is_admin_only(self):
        self.auth.set_snapshot(make_snapshot("user-1"))
        self.assertEqual(self.service.list_notifications().status_code, 403)
        self.assertEqual(self.service.mark_all_read().status_code, 403)

    def test_mark_read_and_unread_count(self):
        self.repo.mark_read.return_value = False
        self.assertEqual(self.service.mark_read("n1").status_code, 404)
        self.repo.mark_all_read.return_value = 3
        self.assertEqual(self.service.mark_all_read().data, 3)

        notes = [
            AdminNotification(id="1", type="new_order", title="t", message="m", is_read=False),
            AdminNotification(id="2", type="new_order", title="t", message="m", is_read=True),
        ]
        self.assertEqual(NotificationService.unread_count(notes), 1)


class TestReviewService(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(make_snapshot("user-1"))
        self.reviews = MagicMock(spec=ReviewRepository)
        self.reviews.create.side_effect = lambda user_id, review, verified: Review(
            id="r1", user_id=user_id, rating=review.rating, title=review.title,
            comment=review.comment, product_id=review.product_id, is_verified_purchase=verified,
        )
        self.orders = MagicMock(spec=OrderRepository)
        self.orders.list_for_user.return_value = [
            Order(
                id="o1",
                total_amount=Decimal("10"),
                order_items=[OrderItem(product_id="p1", quantity=1, price=Decimal("10"))],
            )
        ]
        self.service = ReviewService(
            auth=self.auth, reviews=self.reviews, orders=self.orders, logger=make_logger(),
        )

    def test_verified_purchase_for_bought_product(self):
        result = self.service.submit_review(5, "Great", "Fresh and tender", product_id="p1")
        self.assertTrue(result.data.is_verified_purchase)

    def test_not_verified_for_other_product(self):
        result = self.service.submit_review(4, "Good", "Nice", product_id="p2")
        self.assertFalse(result.data.is_verified_purchase)

    def test_brand_review_verified_by_any_order(self):
        self.assertTrue(self.service.submit_review(5, "Love it", "Every time").data.is_verified_purchase)

    def test_validation(self):
        self.assertEqual(self.service.submit_review(5, "  ", "x").status_code, 400)
        self.assertEqual(self.service.submit_review(6, "t", "c").status_code, 400)
        self.reviews.create.assert_not_called()

    def test_guest_cannot_review(self):
        self.auth.set_snapshot(make_snapshot(user_id=None))
        self.assertEqual(self.service.submit_review(5, "t", "c").status_code, 401)

    def test_average_rating(self):
        reviews = [
            Review(id=str(i), user_id="u", rating=r, title="t", comment="c")
            for i, r in enumerate([5, 4, 4])
        ]
        self.assertEqual(ReviewService.average_rating(reviews), Decimal("4.3"))
        self.assertIsNone(ReviewService.average_rating([]))

    def test_list_reviews_for_product_and_brand(self):
        self.reviews.list_for_product.return_value = []
        self.service.list_reviews("p1")
        self.service.list_reviews()
        self.assertEqual(
            [c.args for c in self.reviews.list_for_product.call_args_list], [("p1",), (None,)],
        )


class TestReviewRepository(unittest.TestCase):
    def setUp(self):
        self.backend, self.client = make_backend()
        self.query = FakeQuery(data=[
            {"id": "r2", "user_id": "u", "product_id": "p1", "rating": 5, "title": "t", "comment": "c"},
            {"id": "r1", "user_id": "u", "product_id": "p1", "rating": 3, "title": "t", "comment": "c"},
        ])
        self.client.table.return_value = self.query
        self.repo = ReviewRepository(backend=self.backend, logger=make_logger())

    def test_product_reviews_newest_first(self):
        reviews = self.repo.list_for_product("p1")

        self.client.table.assert_called_once_with("reviews")
        self.assertEqual(self.query.called("eq"), [("product_id", "p1")])
        self.assertEqual(self.query.called("is_"), [])
        self.assertIn(("order", ("created_at",), {"desc": True}), self.query.calls)
        self.assertEqual([r.id for r in reviews], ["r2", "r1"])

    def test_brand_reviews_have_no_product(self):
        self.repo.list_for_product(None)
        self.assertEqual(self.query.called("is_"), [("product_id", "null")])
        self.assertEqual(self.query.called("eq"), [])

    def test_backend_failure_reads_as_empty(self):
        self.client.table.side_effect = RuntimeError("offline")
        self.assertEqual(self.repo.list_for_product("p1"), [])


class TestBannerService(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(admin_snapshot())
        self.repo = MagicMock(spec=BannerRepository)
        self.repo.update.return_value = Banner(id="b1", title="Summer Sale")
        self.backend = MagicMock()
        self.backend.upload_file.return_value = "https://cdn/banner.png"
        self.config = AppConfig(MAX_IMAGE_SIZE_MB=1)
        self.service = BannerService(
            repo=self.repo, backend=self.backend, auth=self.auth, config=self.config, logger=make_logger(),
        )
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def test_update_sends_only_given_fields(self):
        self.service.update_banner("b1", BannerUpdate(is_published=True))
        self.repo.update.assert_called_once_with("b1", {"is_published": True})

    def test_empty_update_rejected(self):
        self.assertEqual(self.service.update_banner("b1", BannerUpdate()).status_code, 400)

    def test_upload_image_updates_banner(self):
        path = Path(self._tmp.name) / "hero.png"
        path.write_bytes(b"png")
        result = self.service.upload_banner_image("b1", path)
        self.assertTrue(result.success)
        self.assertTrue(self.backend.upload_file.call_args.args[1].startswith("banners/"))
        self.repo.update.assert_called_once_with("b1", {"image_url": "https://cdn/banner.png"})

    def test_customer_cannot_edit(self):
        self.auth.set_snapshot(make_snapshot("user-1"))
        self.assertEqual(self.service.update_banner("b1", BannerUpdate(title="x")).status_code, 403)


if __name__ == "__main__":
    unittest.main()
