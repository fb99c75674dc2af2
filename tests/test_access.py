import unittest

from storefront.access import (
    AuthenticationError,
    AuthorizationError,
    access_denied,
    ensure_access,
    evaluate_route,
    role_grants_admin,
)
from storefront.models.auth_models import AuthSnapshot
from storefront.models.enums import AuthPhase, GuardOutcome, RouteAccess, UserRole
from storefront.models.profile import Profile
from tests.fakes import make_snapshot


class TestEvaluateRoute(unittest.TestCase):
    def test_public_route_always_allowed(self):
        for snapshot in (
            AuthSnapshot(),
            make_snapshot(user_id=None),
            make_snapshot(phase=AuthPhase.PROFILE_LOADING),
        ):
            self.assertEqual(evaluate_route(snapshot, RouteAccess.PUBLIC), GuardOutcome.ALLOW)

    def test_protected_route_waits_while_session_loads(self):
        loading = AuthSnapshot(phase=AuthPhase.LOADING_SESSION)
        self.assertEqual(evaluate_route(loading, RouteAccess.AUTHENTICATED), GuardOutcome.LOADING)
        self.assertEqual(evaluate_route(loading, RouteAccess.ADMIN), GuardOutcome.LOADING)

    def test_admin_route_waits_for_profile(self):
        snapshot = make_snapshot(role=UserRole.ADMIN, phase=AuthPhase.PROFILE_LOADING)
        self.assertEqual(evaluate_route(snapshot, RouteAccess.ADMIN), GuardOutcome.LOADING)

    def test_guest_is_redirected_to_login(self):
        guest = make_snapshot(user_id=None)
        self.assertEqual(evaluate_route(guest, RouteAccess.AUTHENTICATED), GuardOutcome.REDIRECT_LOGIN)
        self.assertEqual(evaluate_route(guest, RouteAccess.ADMIN), GuardOutcome.REDIRECT_LOGIN)

    def test_customer_denied_admin_route(self):
        customer = make_snapshot(role=UserRole.USER)
        self.assertEqual(evaluate_route(customer, RouteAccess.AUTHENTICATED), GuardOutcome.ALLOW)
        self.assertEqual(evaluate_route(customer, RouteAccess.ADMIN), GuardOutcome.DENIED)

    def test_missing_profile_is_not_admin(self):
        no_profile = make_snapshot(role=None)
        self.assertEqual(evaluate_route(no_profile, RouteAccess.AUTHENTICATED), GuardOutcome.ALLOW)
        self.assertEqual(evaluate_route(no_profile, RouteAccess.ADMIN), GuardOutcome.DENIED)

    def test_admin_allowed(self):
        admin = make_snapshot(role=UserRole.ADMIN)
        self.assertEqual(evaluate_route(admin, RouteAccess.ADMIN), GuardOutcome.ALLOW)


class TestEnsureAccess(unittest.TestCase):
    def test_raises_authentication_error_for_guest_and_loading(self):
        with self.assertRaises(AuthenticationError):
            ensure_access(make_snapshot(user_id=None), RouteAccess.AUTHENTICATED)
        with self.assertRaises(AuthenticationError):
            ensure_access(AuthSnapshot(phase=AuthPhase.LOADING_SESSION), RouteAccess.AUTHENTICATED)

    def test_raises_authorization_error_for_customer(self):
        with self.assertRaises(AuthorizationError):
            ensure_access(make_snapshot(), RouteAccess.ADMIN)

    def test_access_denied_status_codes(self):
        self.assertEqual(access_denied(make_snapshot(user_id=None), RouteAccess.ADMIN).status_code, 401)
        self.assertEqual(access_denied(make_snapshot(), RouteAccess.ADMIN).status_code, 403)
        self.assertIsNone(access_denied(make_snapshot(role=UserRole.ADMIN), RouteAccess.ADMIN))


class TestRoles(unittest.TestCase):
    def test_role_grants_admin(self):
        self.assertTrue(role_grants_admin(UserRole.ADMIN))
        self.assertFalse(role_grants_admin(UserRole.USER))
        self.assertFalse(role_grants_admin(None))

    def test_unknown_role_strings_never_grant_admin(self):
        self.assertEqual(Profile(id="p", role="superuser").role, UserRole.USER)
        self.assertEqual(Profile(id="p", role=None).role, UserRole.USER)
        self.assertEqual(Profile(id="p", role=" Admin ").role, UserRole.ADMIN)


if __name__ == "__main__":
    unittest.main()
