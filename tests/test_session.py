import unittest
from unittest.mock import MagicMock
from datetime import datetime
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hall_events.clients.gateway import Gateway
from hall_events.errors import GatewayError, NotAuthenticated, ValidationError
from hall_events.models import Identity
from hall_events.services import profiles
from hall_events.workflows.registration import CancelStatus, JoinStatus, RegistrationState
from hall_events.workflows.session import BrowserSession

NOW = datetime(2025, 3, 10, 12, 0)

EVENT_ROWS = [
    {"id": 1, "Title": "Movie Night", "Date": "2025-03-11", "Location": "Lounge", "MaximumParticipants": 10, "CurrentParticipants": 4},
    {"id": 2, "Title": "Football", "Date": "2025-03-12", "Location": "Field", "MaximumParticipants": 22, "CurrentParticipants": 21},
    {"id": 3, "Title": "Quiz", "Date": "2025-03-13", "Location": "Lounge"},
]


class TestProfiles(unittest.TestCase):

    def setUp(self):
        self.gateway = MagicMock(spec=Gateway)
        self.gateway.sign_in.return_value = Identity(id="u1", email="s@hall.edu")

    def test_sign_in_with_matching_role(self):
        self.gateway.fetch_one.return_value = {"id": "u1", "role": "User", "username": "sam"}

        identity, profile = profiles.sign_in(self.gateway, "s@hall.edu", "pw")

        self.assertEqual(identity.id, "u1")
        self.assertEqual(profile.username, "sam")
        self.gateway.sign_out.assert_not_called()

    def test_role_mismatch_signs_out(self):
        self.gateway.fetch_one.return_value = {"id": "u1", "role": "User"}

        with self.assertRaises(NotAuthenticated):
            profiles.sign_in(self.gateway, "s@hall.edu", "pw", role="Admin")

        self.gateway.sign_out.assert_called_once_with()

    def test_missing_profile_is_created(self):
        self.gateway.fetch_one.return_value = None

        profile = profiles.fetch_profile(self.gateway, Identity(id="u1"))

        self.assertEqual(profile.role, "User")
        self.assertEqual(self.gateway.insert.call_args[0][1]["id"], "u1")

    def test_admins_cannot_sign_up(self):
        with self.assertRaises(ValidationError):
            profiles.sign_up(self.gateway, "boss@hall.edu", "pw", role="Admin")

        self.gateway.sign_up.assert_not_called()

    def test_sign_up_survives_profile_insert_failure(self):
        self.gateway.sign_up.return_value = Identity(id="new")
        self.gateway.insert.side_effect = GatewayError("insert into profiles: denied")

        with self.assertLogs("hall_events.services.profiles", level="WARNING"):
            identity = profiles.sign_up(self.gateway, "new@hall.edu", "pw")

        self.assertEqual(identity.id, "new")

    def test_update_profile_never_writes_role(self):
        self.gateway.fetch_one.return_value = {"id": "u1", "role": "User"}

        profile = profiles.update_profile(self.gateway, Identity(id="u1"), " Sam ", "SoC", "CS")

        self.assertEqual(profile.username, "Sam")
        self.assertNotIn("role", self.gateway.update.call_args[0][2])

    def test_profile_requires_identity(self):
        with self.assertRaises(NotAuthenticated):
            profiles.fetch_profile(self.gateway, None)


class TestBrowserSession(unittest.TestCase):

    def setUp(self):
        self.gateway = MagicMock(spec=Gateway)
        self.session = BrowserSession(self.gateway)
        self.gateway.query.return_value = EVENT_ROWS
        self.session.refresh_events(NOW)
        self.gateway.query.reset_mock()

    def test_refresh_loads_browser(self):
        self.assertEqual(self.session.browser.count, 3)
        self.assertEqual(self.session.browser.current.id, 1)

    def test_search_filters_cached_events(self):
        self.session.search("lounge", NOW)

        self.assertEqual([e.id for e in self.session.browser.filtered_events], [1, 3])
        self.gateway.query.assert_not_called()

    def test_user_change_resets_browser_position(self):
        self.session.browser.next()
        self.session.browser.complete_transition()
        self.gateway.sign_in.return_value = Identity(id="u2")
        self.gateway.fetch_one.return_value = {"id": "u2", "role": "User"}

        self.session.sign_in("other@hall.edu", "pw")

        self.assertEqual(self.session.browser.position, 0)
        self.assertEqual(self.session.profile.id, "u2")

    def test_sign_out_resets_browser_position(self):
        self.session.identity = Identity(id="u1")
        self.session.browser.next()
        self.session.browser.complete_transition()

        self.session.sign_out()

        self.assertIsNone(self.session.identity)
        self.assertEqual(self.session.browser.position, 0)
        self.gateway.sign_out.assert_called_once_with()

    def test_restore_failure_leaves_session_anonymous(self):
        self.gateway.current_identity.side_effect = GatewayError("auth: offline")

        self.assertIsNone(self.session.restore())

    def test_join_refetches_event_for_authoritative_count(self):
        self.session.identity = Identity(id="u1")
        self.gateway.query.return_value = []
        self.gateway.insert.return_value = {"id": 50, "event": 1, "user": "u1"}
        self.gateway.fetch_one.return_value = dict(EVENT_ROWS[0], CurrentParticipants=5)

        result = self.session.join(self.session.browser.current, NOW)

        self.assertEqual(result.status, JoinStatus.JOINED)
        self.gateway.fetch_one.assert_called_once()
        self.assertEqual(self.session.events[0].current_participants, 5)
        self.assertEqual(self.session.browser.current.current_participants, 5)
        self.assertEqual(self.session.controller_for(1).state, RegistrationState.REGISTERED)

    def test_anonymous_join_is_refused(self):
        result = self.session.join(self.session.browser.current, NOW)

        self.assertEqual(result.status, JoinStatus.NOT_AUTHENTICATED)
        self.gateway.insert.assert_not_called()

    def test_cancel_of_vanished_record_refreshes_controller(self):
        self.session.identity = Identity(id="u1")
        self.gateway.query.side_effect = [[{"id": 50, "event": 1, "user": "u1"}], []]
        self.gateway.delete.return_value = 0
        self.gateway.fetch_one.return_value = EVENT_ROWS[0]

        result = self.session.cancel(1, lambda: True)

        self.assertEqual(result.status, CancelStatus.NOT_FOUND)
        self.assertEqual(self.session.controller_for(1).state, RegistrationState.UNREGISTERED)

    def test_cancel_takes_count_from_refetched_event(self):
        self.session.identity = Identity(id="u1")
        self.gateway.query.return_value = [{"id": 50, "event": 1, "user": "u1"}]
        self.gateway.delete.return_value = 1
        self.gateway.fetch_one.return_value = dict(EVENT_ROWS[0], CurrentParticipants=3)

        result = self.session.cancel(1, lambda: True)

        self.assertEqual(result.status, CancelStatus.CANCELLED)
        self.gateway.update.assert_not_called()
        self.assertEqual(self.session.browser.current.current_participants, 3)

    def test_cancel_leaves_count_alone_when_refetch_fails(self):
        self.session.identity = Identity(id="u1")
        self.gateway.query.return_value = [{"id": 50, "event": 1, "user": "u1"}]
        self.gateway.delete.return_value = 1
        self.gateway.fetch_one.side_effect = GatewayError("query Events: offline")

        result = self.session.cancel(1, lambda: True)

        self.assertEqual(result.status, CancelStatus.CANCELLED)
        self.gateway.update.assert_not_called()
        self.assertEqual(self.session.events[0].current_participants, 4)
        self.assertEqual(self.session.browser.current.current_participants, 4)

    def test_refresh_is_refused_while_running(self):
        with self.session._fetch_guard.attempt():
            self.assertFalse(self.session.refresh_events(NOW))
        self.gateway.query.assert_not_called()


if __name__ == '__main__':
    unittest.main()
