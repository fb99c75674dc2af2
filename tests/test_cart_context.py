import unittest
from decimal import Decimal
from unittest.mock import MagicMock

from storefront.models.cart import CartItem
from storefront.models.product import ProductSummary
from storefront.repositories.cart_repository import CartRepository
from storefront.services.cart_context import CartContext
from tests.fakes import ManualTaskQueue, StaticAuth, make_logger, make_snapshot


def cart_item(item_id: str, product_id: str, quantity: int, price: str) -> CartItem:
    return CartItem(
        id=item_id,
        user_id="user-1",
        product_id=product_id,
        quantity=quantity,
        product=ProductSummary(id=product_id, name=f"Product {product_id}", price=Decimal(price)),
    )


class CartContextTestCase(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(make_snapshot("user-1"))
        self.repo = MagicMock(spec=CartRepository)
        self.repo.list_for_user.return_value = []
        self.repo.find.return_value = None
        self.queue = ManualTaskQueue()
        self.cart = CartContext(auth=self.auth, repo=self.repo, tasks=self.queue, logger=make_logger())


class TestCartOperations(CartContextTestCase):
    def test_guest_cannot_add(self):
        self.auth.set_snapshot(make_snapshot(user_id=None))
        result = self.cart.add_to_cart("p1")
        self.assertFalse(result.success)
        self.assertEqual(result.status_code, 401)
        self.repo.insert.assert_not_called()

    def test_add_inserts_new_row_then_refetches(self):
        self.repo.list_for_user.return_value = [cart_item("c1", "p1", 2, "100")]
        result = self.cart.add_to_cart("p1", 2)

        self.assertTrue(result.success)
        self.repo.insert.assert_called_once_with("user-1", "p1", 2)
        self.repo.list_for_user.assert_called_with("user-1")
        self.assertEqual(self.cart.cart_count, 2)

    def test_add_merges_into_existing_row(self):
        self.repo.find.return_value = cart_item("c1", "p1", 3, "100")
        self.cart.add_to_cart("p1", 2)
        self.repo.set_quantity.assert_called_once_with("user-1", "c1", 5)
        self.repo.insert.assert_not_called()

    def test_add_rejects_non_positive_quantity(self):
        self.assertEqual(self.cart.add_to_cart("p1", 0).status_code, 400)

    def test_quantity_below_one_is_rejected_not_deleted(self):
        result = self.cart.update_cart_item_quantity("c1", 0)
        self.assertEqual(result.status_code, 400)
        self.repo.delete.assert_not_called()
        self.repo.set_quantity.assert_not_called()

    def test_remove_and_clear_are_scoped_to_user(self):
        self.cart.remove_from_cart("c1")
        self.repo.delete.assert_called_once_with("user-1", "c1")
        self.cart.clear_cart()
        self.repo.delete_all.assert_called_once_with("user-1")

    def test_backend_failure_is_reported(self):
        self.repo.insert.side_effect = RuntimeError("boom")
        result = self.cart.add_to_cart("p1")
        self.assertFalse(result.success)
        self.assertEqual(result.status_code, 500)

    def test_total_uses_current_snapshot(self):
        self.repo.list_for_user.return_value = [
            cart_item("c1", "p1", 2, "120.50"),
            cart_item("c2", "p2", 1, "99"),
        ]
        self.cart.refresh_cart()
        self.assertEqual(self.cart.get_total_amount(), Decimal("340.00"))
        self.assertEqual(self.cart.cart_count, 3)

    def test_clear_cart_zeroes_total(self):
        self.repo.list_for_user.return_value = [cart_item("c1", "p1", 2, "120.50")]
        self.cart.refresh_cart()
        self.assertEqual(self.cart.get_total_amount(), Decimal("241.00"))

        self.repo.delete_all.side_effect = lambda user_id: setattr(
            self.repo.list_for_user, "return_value", [],
        )
        result = self.cart.clear_cart()

        self.assertTrue(result.success)
        self.assertEqual(self.cart.get_total_amount(), Decimal("0"))
        self.assertEqual(self.cart.cart_count, 0)
        self.assertEqual(self.cart.items, [])

    def test_refresh_failure_keeps_items(self):
        self.repo.list_for_user.return_value = [cart_item("c1", "p1", 1, "10")]
        self.cart.refresh_cart()
        self.repo.list_for_user.side_effect = RuntimeError("timeout")
        result = self.cart.refresh_cart()
        self.assertFalse(result.success)
        self.assertEqual(len(self.cart.items), 1)


class TestCartFollowsIdentity(CartContextTestCase):
    def test_attach_defers_fetch_for_signed_in_user(self):
        self.cart.attach()
        self.repo.list_for_user.assert_not_called()
        self.assertEqual(len(self.queue.tasks), 1)
        self.queue.run_all()
        self.repo.list_for_user.assert_called_once_with("user-1")

    def test_sign_out_empties_cart(self):
        self.repo.list_for_user.return_value = [cart_item("c1", "p1", 1, "10")]
        self.cart.attach()
        self.queue.run_all()
        seen = []
        self.cart.add_listener(seen.append)

        self.auth.set_snapshot(make_snapshot(user_id=None))
        self.assertEqual(self.cart.items, [])
        self.assertEqual(seen[-1], [])
        self.assertEqual(self.queue.tasks, [])

    def test_fetch_for_previous_user_is_not_applied(self):
        self.cart.attach()

        def _switch_during_fetch(user_id):
            self.auth.set_snapshot(make_snapshot("user-2"))
            return [cart_item("c1", "p1", 4, "10")]

        self.repo.list_for_user.side_effect = _switch_during_fetch
        self.queue.run_next()
        self.assertEqual(self.cart.items, [])

    def test_detach_stops_following(self):
        self.cart.attach()
        self.cart.detach()
        self.queue.tasks.clear()
        self.auth.set_snapshot(make_snapshot("user-2"))
        self.assertEqual(self.queue.tasks, [])


if __name__ == "__main__":
    unittest.main()
