import unittest
from unittest.mock import MagicMock

from storefront.models.auth_models import AuthErrorCode, AuthSnapshot
from storefront.models.enums import AuthPhase, UserRole
from storefront.models.profile import Profile
from storefront.repositories.profile_repository import ProfileRepository
from storefront.services.auth_context import AuthContext
from storefront.session import SessionStore
from tests.fakes import FakeAuthClient, ManualTaskQueue, make_backend, make_logger, make_raw_session


class AuthContextTestCase(unittest.TestCase):
    def setUp(self):
        self.auth_client = FakeAuthClient()
        self.backend, _ = make_backend(self.auth_client)
        self.profiles = MagicMock(spec=ProfileRepository)
        self.profiles.get_by_id.side_effect = lambda user_id: Profile(
            id=user_id, email=f"{user_id}@example.com", role=UserRole.USER,
        )
        self.queue = ManualTaskQueue()
        self.context = AuthContext(
            backend=self.backend,
            profiles=self.profiles,
            tasks=self.queue,
            store=SessionStore(),
            logger=make_logger(),
        )
        self.snapshots: list[AuthSnapshot] = []
        self.context.add_listener(self.snapshots.append)

    def boot(self, session=None):
        self.auth_client.current_session = session
        self.context.init()
        self.queue.run_all()


class TestLifecycle(AuthContextTestCase):
    def test_init_enters_loading_session(self):
        self.context.init()
        self.assertEqual(self.context.snapshot().phase, AuthPhase.LOADING_SESSION)
        self.assertTrue(self.context.snapshot().is_loading)
        self.assertEqual(len(self.auth_client.callbacks), 1)

    def test_init_twice_subscribes_once(self):
        self.context.init()
        self.context.init()
        self.assertEqual(len(self.auth_client.callbacks), 1)

    def test_no_session_settles_unauthenticated(self):
        self.boot(session=None)
        snapshot = self.context.snapshot()
        self.assertEqual(snapshot.phase, AuthPhase.UNAUTHENTICATED)
        self.assertFalse(snapshot.is_authenticated)
        self.assertFalse(snapshot.is_loading)
        self.profiles.get_by_id.assert_not_called()

    def test_existing_session_loads_profile(self):
        self.auth_client.current_session = make_raw_session("user-1")
        self.context.init()
        self.queue.run_next()

        loading = self.context.snapshot()
        self.assertEqual(loading.phase, AuthPhase.PROFILE_LOADING)
        self.assertTrue(loading.is_authenticated)
        self.assertIsNone(loading.profile)

        self.queue.run_all()
        ready = self.context.snapshot()
        self.assertEqual(ready.phase, AuthPhase.READY)
        self.assertEqual(ready.profile.id, "user-1")
        self.assertEqual(ready.role, UserRole.USER)

    def test_missing_profile_still_becomes_ready(self):
        self.profiles.get_by_id.side_effect = None
        self.profiles.get_by_id.return_value = None
        self.boot(session=make_raw_session("user-1"))
        snapshot = self.context.snapshot()
        self.assertEqual(snapshot.phase, AuthPhase.READY)
        self.assertIsNone(snapshot.profile)
        self.assertIsNone(snapshot.role)

    def test_dispose_unsubscribes_and_ignores_pending_work(self):
        self.context.init()
        self.context.dispose()
        self.queue.run_all()
        self.assertTrue(self.auth_client.unsubscribed)
        self.assertFalse(self.context.is_mounted)
        self.assertEqual(self.context.snapshot().phase, AuthPhase.LOADING_SESSION)

    def test_listeners_receive_each_transition(self):
        self.boot(session=make_raw_session("user-1"))
        phases = [s.phase for s in self.snapshots]
        self.assertEqual(
            phases,
            [AuthPhase.LOADING_SESSION, AuthPhase.PROFILE_LOADING, AuthPhase.READY],
        )


class TestAuthEvents(AuthContextTestCase):
    def test_sign_out_during_profile_fetch_discards_profile(self):
        self.boot(session=None)
        self.auth_client.emit("SIGNED_IN", make_raw_session("user-1"))
        self.auth_client.emit("SIGNED_OUT", None)
        self.queue.run_all()

        snapshot = self.context.snapshot()
        self.assertEqual(snapshot.phase, AuthPhase.UNAUTHENTICATED)
        self.assertIsNone(snapshot.profile)
        self.profiles.get_by_id.assert_not_called()

    def test_fetch_resolving_after_sign_out_is_dropped(self):
        self.boot(session=None)

        def _slow_fetch(user_id):
            self.auth_client.emit("SIGNED_OUT", None)
            return Profile(id=user_id, role=UserRole.ADMIN)

        self.profiles.get_by_id.side_effect = _slow_fetch
        self.auth_client.emit("SIGNED_IN", make_raw_session("user-1"))
        self.queue.run_all()

        snapshot = self.context.snapshot()
        self.assertEqual(snapshot.phase, AuthPhase.UNAUTHENTICATED)
        self.assertIsNone(snapshot.profile)
        self.assertFalse(snapshot.is_admin)

    def test_sign_in_while_session_read_is_in_flight_wins(self):
        def _read_then_sign_in():
            self.auth_client.emit("SIGNED_IN", make_raw_session("user-1"))
            return None

        self.auth_client.get_session = _read_then_sign_in
        self.context.init()
        self.queue.run_all()

        snapshot = self.context.snapshot()
        self.assertTrue(snapshot.is_authenticated)
        self.assertEqual(snapshot.phase, AuthPhase.READY)
        self.assertEqual(snapshot.profile.id, "user-1")

    def test_last_event_wins(self):
        self.boot(session=None)
        self.auth_client.emit("SIGNED_IN", make_raw_session("user-1"))
        self.auth_client.emit("SIGNED_IN", make_raw_session("user-2"))
        self.queue.run_all()

        snapshot = self.context.snapshot()
        self.assertEqual(snapshot.user.id, "user-2")
        self.assertEqual(snapshot.profile.id, "user-2")
        self.profiles.get_by_id.assert_called_once_with("user-2")

    def test_token_refresh_keeps_ready_user_ready(self):
        self.boot(session=make_raw_session("user-1"))
        self.auth_client.emit("TOKEN_REFRESHED", make_raw_session("user-1"))

        snapshot = self.context.snapshot()
        self.assertEqual(snapshot.phase, AuthPhase.READY)
        self.assertEqual(snapshot.profile.id, "user-1")
        self.assertEqual(len(self.queue.tasks), 1)

    def test_token_refresh_picks_up_role_change(self):
        self.boot(session=make_raw_session("user-1"))
        self.profiles.get_by_id.side_effect = lambda user_id: Profile(id=user_id, role="admin")
        self.auth_client.emit("TOKEN_REFRESHED", make_raw_session("user-1"))
        self.queue.run_all()
        self.assertTrue(self.context.snapshot().is_admin)

    def test_switching_user_clears_previous_profile(self):
        self.boot(session=make_raw_session("user-1"))
        self.auth_client.emit("SIGNED_IN", make_raw_session("user-2"))

        snapshot = self.context.snapshot()
        self.assertEqual(snapshot.phase, AuthPhase.PROFILE_LOADING)
        self.assertIsNone(snapshot.profile)


class TestOperations(AuthContextTestCase):
    def test_sign_in_validates_email(self):
        result = self.context.sign_in("not-an-email", "secret")
        self.assertFalse(result.success)
        self.assertEqual(result.error_code, AuthErrorCode.VALIDATION_ERROR)

    def test_sign_in_requires_password(self):
        result = self.context.sign_in("cust@example.com", "")
        self.assertEqual(result.error_code, AuthErrorCode.VALIDATION_ERROR)

    def test_sign_in_success_does_not_change_state(self):
        self.boot(session=None)
        result = self.context.sign_in("  Cust@Example.com ", "secret")
        self.assertTrue(result.success)
        self.assertEqual(result.email, "cust@example.com")
        self.assertEqual(self.context.snapshot().phase, AuthPhase.UNAUTHENTICATED)

    def test_sign_in_maps_backend_errors(self):
        self.auth_client.sign_in_error = Exception("Invalid login credentials")
        result = self.context.sign_in("cust@example.com", "wrong")
        self.assertEqual(result.error_code, AuthErrorCode.INVALID_CREDENTIALS)

        self.auth_client.sign_in_error = ConnectionError("offline")
        result = self.context.sign_in("cust@example.com", "wrong")
        self.assertEqual(result.error_code, AuthErrorCode.NETWORK_ERROR)

    def test_sign_up_checks_password_length(self):
        result = self.context.sign_up("new@example.com", "123")
        self.assertFalse(result.success)
        self.assertEqual(result.error_code, AuthErrorCode.VALIDATION_ERROR)

        result = self.context.sign_up("new@example.com", "123456", full_name=" New Person ")
        self.assertTrue(result.success)

    def test_sign_out_clears_state_even_if_backend_fails(self):
        self.boot(session=make_raw_session("user-1"))
        self.auth_client.sign_out = MagicMock(side_effect=RuntimeError("network"))
        self.context.sign_out()

        snapshot = self.context.snapshot()
        self.assertEqual(snapshot.phase, AuthPhase.UNAUTHENTICATED)
        self.assertIsNone(snapshot.user)
        self.assertIsNone(snapshot.profile)

    def test_refresh_profile_applies_new_profile(self):
        self.boot(session=make_raw_session("user-1"))
        self.profiles.get_by_id.side_effect = lambda user_id: Profile(
            id=user_id, full_name="Asha Rao",
        )
        profile = self.context.refresh_profile()
        self.assertEqual(profile.full_name, "Asha Rao")
        self.assertEqual(self.context.snapshot().display_name, "Asha Rao")

    def test_refresh_profile_without_session(self):
        self.boot(session=None)
        self.assertIsNone(self.context.refresh_profile())


if __name__ == "__main__":
    unittest.main()
