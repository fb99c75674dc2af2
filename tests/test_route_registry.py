import unittest

from storefront.models.enums import RouteAccess, UserRole
from storefront.ui.route_registry import RouteRegistry
from tests.fakes import make_logger, make_snapshot


def _factory(parent):
    return parent


class TestRouteRegistry(unittest.TestCase):
    def setUp(self):
        self.registry = RouteRegistry(logger=make_logger())
        self.registry.register("shop", "Shop", "S", _factory)
        self.registry.register("orders", "My Orders", "O", _factory, RouteAccess.AUTHENTICATED)
        self.registry.register("admin_orders", "Manage Orders", "M", _factory, RouteAccess.ADMIN)

    def visible(self, snapshot):
        return [entry.route_id for entry in self.registry.get_routes_for(snapshot)]

    def test_sidebar_follows_role(self):
        self.assertEqual(self.visible(make_snapshot(user_id=None)), ["shop"])
        self.assertEqual(self.visible(make_snapshot("user-1")), ["shop", "orders"])
        self.assertEqual(
            self.visible(make_snapshot("admin-1", role=UserRole.ADMIN)),
            ["shop", "orders", "admin_orders"],
        )

    def test_missing_profile_hides_admin_routes(self):
        self.assertEqual(self.visible(make_snapshot("admin-1", role=None)), ["shop", "orders"])

    def test_first_route_is_default_unless_flagged(self):
        self.assertEqual(self.registry.default_route_id, "shop")
        self.registry.register("account", "Account", "A", _factory, RouteAccess.AUTHENTICATED, default=True)
        self.assertEqual(self.registry.default_route_id, "account")

    def test_unknown_route(self):
        with self.assertRaises(KeyError):
            self.registry.get_route("nope")
        self.assertEqual(self.registry.get_route("orders").access, RouteAccess.AUTHENTICATED)


if __name__ == "__main__":
    unittest.main()
