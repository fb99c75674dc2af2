import unittest
from decimal import Decimal
from unittest.mock import MagicMock

from storefront.models.cart import CartItem
from storefront.models.enums import NotificationType, PaymentMethod, UserRole
from storefront.models.order import CheckoutLine, DeliveryAddress, GuestCheckoutRequest, Order, OrderItem
from storefront.models.product import Product, ProductSummary
from storefront.models.service_models import ServiceResult
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.cart_context import CartContext
from storefront.services.checkout_service import CheckoutService
from storefront.services.notification_service import NotificationService
from tests.fakes import StaticAuth, make_logger, make_snapshot

ADDRESS = DeliveryAddress(
    address_line_1="12 MG Road",
    city="Bengaluru",
    state="KA",
    postal_code="560001",
)


def cart_item(product_id: str, quantity: int, price: str) -> CartItem:
    return CartItem(
        id=f"cart-{product_id}",
        product_id=product_id,
        quantity=quantity,
        product=ProductSummary(id=product_id, name=product_id, price=Decimal(price)),
    )


class CheckoutTestCase(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(make_snapshot("user-1", full_name="Asha Rao"))
        self.cart = MagicMock(spec=CartContext)
        self.cart.items = [cart_item("p1", 2, "249.50"), cart_item("p2", 1, "100")]
        self.cart.clear_cart.return_value = ServiceResult(success=True, data=[])
        self.products = MagicMock(spec=ProductRepository)
        self.orders = MagicMock(spec=OrderRepository)
        self.orders.create.side_effect = lambda values: Order(id="abcdef12-0000", **values)
        self.orders.get_by_id.return_value = None
        self.profiles = MagicMock(spec=ProfileRepository)
        self.notifications = MagicMock(spec=NotificationService)
        self.service = CheckoutService(
            auth=self.auth,
            cart=self.cart,
            products=self.products,
            orders=self.orders,
            profiles=self.profiles,
            notifications=self.notifications,
            logger=make_logger(),
        )


class TestCheckoutCart(CheckoutTestCase):
    def test_places_order_priced_from_cart(self):
        result = self.service.checkout_cart(ADDRESS, " 9876543210 ")

        self.assertTrue(result.success)
        values = self.orders.create.call_args.args[0]
        self.assertEqual(values["user_id"], "user-1")
        self.assertEqual(values["total_amount"], Decimal("599.00"))
        self.assertEqual(values["phone"], "9876543210")
        self.assertEqual(values["payment_method"], PaymentMethod.COD)
        self.assertEqual(values["delivery_address"]["full_name"], "Asha Rao")

        order_id, items = self.orders.add_items.call_args.args
        self.assertEqual(order_id, "abcdef12-0000")
        self.assertEqual(
            [(i.product_id, i.quantity, i.price) for i in items],
            [("p1", 2, Decimal("249.50")), ("p2", 1, Decimal("100"))],
        )

    def test_total_matches_item_sum(self):
        self.service.checkout_cart(ADDRESS, "9876543210")
        values = self.orders.create.call_args.args[0]
        items = self.orders.add_items.call_args.args[1]
        self.assertEqual(values["total_amount"], sum(i.price * i.quantity for i in items))

    def test_clears_cart_and_notifies(self):
        self.service.checkout_cart(ADDRESS, "9876543210")
        self.cart.clear_cart.assert_called_once()
        self.notifications.send_order_confirmation.assert_called_once()
        self.assertEqual(
            self.notifications.send_order_confirmation.call_args.args[0], "cust@example.com",
        )
        call = self.notifications.notify_admins.call_args
        self.assertEqual(call.args[0], NotificationType.NEW_ORDER)
        self.assertEqual(call.kwargs["order_id"], "abcdef12-0000")
        self.assertEqual(call.kwargs["title"], "New order #ABCDEF12")

    def test_remembers_address_on_profile(self):
        self.service.checkout_cart(ADDRESS, "9876543210")
        user_id, email, update = self.profiles.save_details.call_args.args
        self.assertEqual((user_id, email), ("user-1", "cust@example.com"))
        self.assertEqual(update.city, "Bengaluru")
        self.assertEqual(update.phone, "9876543210")

    def test_profile_save_failure_does_not_block_order(self):
        self.profiles.save_details.side_effect = RuntimeError("rls")
        self.assertTrue(self.service.checkout_cart(ADDRESS, "9876543210").success)

    def test_guest_is_rejected(self):
        self.auth.set_snapshot(make_snapshot(user_id=None))
        result = self.service.checkout_cart(ADDRESS, "9876543210")
        self.assertEqual(result.status_code, 401)
        self.orders.create.assert_not_called()

    def test_only_cash_on_delivery(self):
        result = self.service.checkout_cart(ADDRESS, "9876543210", payment_method=PaymentMethod.ONLINE)
        self.assertEqual(result.status_code, 400)
        self.assertIn("coming soon", result.error)

    def test_phone_required(self):
        self.assertEqual(self.service.checkout_cart(ADDRESS, "   ").status_code, 400)

    def test_empty_cart(self):
        self.cart.items = []
        result = self.service.checkout_cart(ADDRESS, "9876543210")
        self.assertEqual(result.status_code, 400)
        self.orders.create.assert_not_called()

    def test_unavailable_product_in_cart(self):
        self.cart.items = [CartItem(id="c1", product_id="gone", quantity=1, product=None)]
        self.assertEqual(self.service.checkout_cart(ADDRESS, "9876543210").status_code, 409)

    def test_order_insert_failure(self):
        self.orders.create.side_effect = RuntimeError("insert failed")
        result = self.service.checkout_cart(ADDRESS, "9876543210")
        self.assertEqual(result.status_code, 500)
        self.cart.clear_cart.assert_not_called()

    def test_item_insert_failure_keeps_cart(self):
        self.orders.add_items.side_effect = RuntimeError("items failed")
        result = self.service.checkout_cart(ADDRESS, "9876543210")
        self.assertFalse(result.success)
        self.assertIn("ABCDEF12", result.error)
        self.cart.clear_cart.assert_not_called()
        self.notifications.notify_admins.assert_not_called()

    def test_returns_stored_order_when_available(self):
        stored = Order(
            id="abcdef12-0000",
            total_amount=Decimal("599.00"),
            order_items=[OrderItem(product_id="p1", quantity=2, price=Decimal("249.50"))],
        )
        self.orders.get_by_id.return_value = stored
        result = self.service.checkout_cart(ADDRESS, "9876543210")
        self.assertIs(result.data, stored)


class TestGuestCheckout(CheckoutTestCase):
    def setUp(self):
        super().setUp()
        self.auth.set_snapshot(make_snapshot(user_id=None))
        self.products.get_many.return_value = {
            "p1": Product(id="p1", name="Mutton Curry Cut", price=Decimal("650")),
            "p2": Product(id="p2", name="Old Stock", price=Decimal("10"), is_active=False),
        }

    def request(self, *lines: tuple[str, int]) -> GuestCheckoutRequest:
        return GuestCheckoutRequest(
            full_name=" Ravi Kumar ",
            email="ravi@example.com",
            phone="9000000000",
            address=ADDRESS,
            lines=[CheckoutLine(product_id=p, quantity=q) for p, q in lines],
        )

    def test_guest_order_is_priced_from_catalogue(self):
        result = self.service.guest_checkout(self.request(("p1", 2)))

        self.assertTrue(result.success)
        values = self.orders.create.call_args.args[0]
        self.assertIsNone(values["user_id"])
        self.assertEqual(values["total_amount"], Decimal("1300.00"))
        self.assertEqual(values["delivery_address"]["full_name"], "Ravi Kumar")
        self.cart.clear_cart.assert_not_called()
        self.profiles.save_details.assert_not_called()
        self.assertEqual(
            self.notifications.send_order_confirmation.call_args.args[0], "ravi@example.com",
        )

    def test_inactive_or_unknown_products_rejected(self):
        self.assertEqual(self.service.guest_checkout(self.request(("p2", 1))).status_code, 400)
        self.assertEqual(self.service.guest_checkout(self.request(("nope", 1))).status_code, 400)
        self.orders.create.assert_not_called()

    def test_catalogue_failure(self):
        self.products.get_many.side_effect = RuntimeError("down")
        self.assertEqual(self.service.guest_checkout(self.request(("p1", 1))).status_code, 500)

    def test_admin_can_also_use_guest_checkout(self):
        self.auth.set_snapshot(make_snapshot("admin-1", role=UserRole.ADMIN))
        self.assertTrue(self.service.guest_checkout(self.request(("p1", 1))).success)


class TestOrderTotal(unittest.TestCase):
    def test_rounds_to_cents(self):
        items = [OrderItem(product_id="p", quantity=3, price=Decimal("33.333"))]
        self.assertEqual(CheckoutService.order_total(items), Decimal("100.00"))


if __name__ == "__main__":
    unittest.main()
