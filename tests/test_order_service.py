import unittest
from decimal import Decimal
from unittest.mock import MagicMock

from storefront.models.enums import OrderStatus, ShippingStatus, UserRole
from storefront.models.order import AdminOrderView, DeliveryAddress, Order, OrderStatusUpdate
from storefront.models.profile import Profile
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.order_service import OrderService
from tests.fakes import StaticAuth, make_logger, make_snapshot


def order(
    order_id: str,
    total: str,
    user_id: str | None = "user-1",
    status: OrderStatus = OrderStatus.PENDING,
    shipping: ShippingStatus = ShippingStatus.PENDING,
    **extra,
) -> Order:
    return Order(
        id=order_id,
        user_id=user_id,
        total_amount=Decimal(total),
        status=status,
        shipping_status=shipping,
        **extra,
    )


class OrderServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(make_snapshot("user-1"))
        self.orders = MagicMock(spec=OrderRepository)
        self.profiles = MagicMock(spec=ProfileRepository)
        self.logger = make_logger()
        self.service = OrderService(
            auth=self.auth, orders=self.orders, profiles=self.profiles, logger=self.logger,
        )


class TestCustomerOrders(OrderServiceTestCase):
    def test_lists_only_own_orders(self):
        self.orders.list_for_user.return_value = [order("o1", "10")]
        result = self.service.list_orders_for_user()
        self.assertTrue(result.success)
        self.orders.list_for_user.assert_called_once_with("user-1")

    def test_guest_cannot_list(self):
        self.auth.set_snapshot(make_snapshot(user_id=None))
        self.assertEqual(self.service.list_orders_for_user().status_code, 401)

    def test_someone_elses_order_is_not_found(self):
        self.orders.get_by_id.return_value = order("o1", "10", user_id="user-2")
        self.assertEqual(self.service.get_order("o1").status_code, 404)

    def test_admin_can_read_any_order(self):
        self.auth.set_snapshot(make_snapshot("admin-1", role=UserRole.ADMIN))
        self.orders.get_by_id.return_value = order("o1", "10", user_id="user-2")
        self.assertTrue(self.service.get_order("o1").success)


class TestStats(unittest.TestCase):
    def test_buckets_and_spend(self):
        stats = OrderService.compute_stats([
            order("a", "100", shipping=ShippingStatus.DELIVERED, status=OrderStatus.COMPLETED),
            order("b", "50", shipping=ShippingStatus.SHIPPED),
            order("c", "25", shipping=ShippingStatus.OUT_FOR_DELIVERY),
            order("d", "10"),
            order("e", "999", status=OrderStatus.CANCELLED),
        ])
        self.assertEqual(stats.total_orders, 5)
        self.assertEqual(stats.delivered, 1)
        self.assertEqual(stats.in_transit, 2)
        self.assertEqual(stats.pending, 1)
        self.assertEqual(stats.cancelled, 1)
        self.assertEqual(stats.total_spent, Decimal("185"))

    def test_empty(self):
        stats = OrderService.compute_stats([])
        self.assertEqual(stats.total_orders, 0)
        self.assertEqual(stats.total_spent, Decimal("0"))


class TestAdminOrders(OrderServiceTestCase):
    def setUp(self):
        super().setUp()
        self.auth.set_snapshot(make_snapshot("admin-1", role=UserRole.ADMIN))

    def test_list_all_joins_customer_details(self):
        self.orders.list_all.return_value = [
            order("o1", "10", user_id="user-1"),
            order("o2", "20", user_id=None, delivery_address=DeliveryAddress(
                full_name="Walk In", address_line_1="x", city="y", state="z", postal_code="1",
            )),
        ]
        self.profiles.get_many.return_value = {
            "user-1": Profile(id="user-1", email="a@example.com", full_name="Asha"),
        }
        result = self.service.list_all_orders()

        self.assertTrue(result.success)
        self.profiles.get_many.assert_called_once_with(["user-1"])
        views = result.data
        self.assertEqual(views[0].customer_email, "a@example.com")
        self.assertEqual(views[1].customer_label, "Walk In (guest)")

    def test_customer_cannot_list_all(self):
        self.auth.set_snapshot(make_snapshot("user-1"))
        self.assertEqual(self.service.list_all_orders().status_code, 403)
        self.orders.list_all.assert_not_called()

    def test_filter_orders(self):
        views = [
            AdminOrderView(order=order("abc123", "1", phone="98450"), customer_email="asha@example.com"),
            AdminOrderView(order=order("def456", "1"), customer_name="Ravi Kumar"),
        ]
        self.assertEqual(len(OrderService.filter_orders(views, "")), 2)
        self.assertEqual(OrderService.filter_orders(views, "ABC")[0].order.id, "abc123")
        self.assertEqual(OrderService.filter_orders(views, "ravi")[0].order.id, "def456")
        self.assertEqual(OrderService.filter_orders(views, "9845")[0].order.id, "abc123")
        self.assertEqual(OrderService.filter_orders(views, "zzz"), [])

    def test_update_status(self):
        updated = order("o1", "10", shipping=ShippingStatus.SHIPPED)
        self.orders.update_status.return_value = updated
        update = OrderStatusUpdate(
            order_id="o1",
            status=OrderStatus.PROCESSING,
            shipping_status=ShippingStatus.SHIPPED,
            courier_name=" Blue Dart ",
            tracking_id="  ",
        )
        result = self.service.update_order_status(update)

        self.assertTrue(result.success)
        sent = self.orders.update_status.call_args.args[0]
        self.assertEqual(sent.courier_name, "Blue Dart")
        self.assertIsNone(sent.tracking_id)
        audit_lines = [c.args[1] for c in self.logger.info.call_args_list if c.args[0] == "AUDIT: %s"]
        self.assertTrue(any("UPDATE_ORDER_STATUS" in line for line in audit_lines))

    def test_update_missing_order(self):
        self.orders.update_status.return_value = None
        update = OrderStatusUpdate(
            order_id="nope", status=OrderStatus.CONFIRMED, shipping_status=ShippingStatus.PENDING,
        )
        self.assertEqual(self.service.update_order_status(update).status_code, 404)

    def test_customer_cannot_update(self):
        self.auth.set_snapshot(make_snapshot("user-1"))
        update = OrderStatusUpdate(
            order_id="o1", status=OrderStatus.CONFIRMED, shipping_status=ShippingStatus.PENDING,
        )
        self.assertEqual(self.service.update_order_status(update).status_code, 403)
        self.orders.update_status.assert_not_called()


if __name__ == "__main__":
    unittest.main()
