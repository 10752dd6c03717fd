import unittest
from unittest.mock import MagicMock, patch
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from supabase import PostgrestAPIError

from hall_events.clients.gateway import Filter, Gateway, Order
from hall_events.errors import ConstraintKind, ConstraintViolation, GatewayError
from hall_events.models import Identity


def make_builder(data=None, count=None):
    """A query-builder mock whose chained calls all return itself."""
    builder = MagicMock()
    for name in ("select", "eq", "neq", "gt", "gte", "lt", "lte", "in_", "ilike", "order",
                 "insert", "update", "delete"):
        getattr(builder, name).return_value = builder
    builder.not_ = builder
    builder.execute.return_value = MagicMock(data=data, count=count)
    return builder


class TestGatewayTables(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock()
        self.gateway = Gateway(self.client)

    def test_query_applies_filters_and_ordering(self):
        builder = make_builder(data=[{"id": 1}])
        self.client.table.return_value = builder

        rows = self.gateway.query(
            "Events",
            [Filter("Date", "gte", "2025-03-01"), Filter("Location", "not_ilike", "%online%"),
             Filter("id", "in", (3, 4))],
            [Order("Date"), Order("Time", nulls_first=True)],
            columns="id,Title",
        )

        self.assertEqual(rows, [{"id": 1}])
        self.client.table.assert_called_once_with("Events")
        builder.select.assert_called_once_with("id,Title")
        builder.gte.assert_called_once_with("Date", "2025-03-01")
        builder.ilike.assert_called_once_with("Location", "%online%")
        builder.in_.assert_called_once_with("id", [3, 4])
        builder.order.assert_any_call("Date", desc=False)
        builder.order.assert_any_call("Time", desc=False, nullsfirst=True)

    def test_query_with_no_data_returns_empty_list(self):
        self.client.table.return_value = make_builder(data=None)

        self.assertEqual(self.gateway.query("Events"), [])

    def test_unknown_operator_is_rejected(self):
        with self.assertRaises(ValueError):
            Filter("Date", "between", "x")

    def test_insert_returns_stored_row(self):
        builder = make_builder(data=[{"id": 12, "user": "u", "event": 3}])
        self.client.table.return_value = builder

        row = self.gateway.insert("attendance", {"user": "u", "event": 3})

        self.assertEqual(row["id"], 12)
        builder.insert.assert_called_once_with({"user": "u", "event": 3})

    def test_capacity_error_code_becomes_constraint_violation(self):
        builder = make_builder()
        builder.execute.side_effect = PostgrestAPIError(
            {"message": "Event is full", "code": "23514", "hint": None, "details": None}
        )
        self.client.table.return_value = builder

        with self.assertRaises(ConstraintViolation) as ctx:
            self.gateway.insert("attendance", {"user": "u", "event": 3})

        self.assertEqual(ctx.exception.kind, ConstraintKind.CAPACITY_FULL)
        self.assertEqual(ctx.exception.store_code, "23514")

    def test_unique_violation_is_duplicate(self):
        builder = make_builder()
        builder.execute.side_effect = PostgrestAPIError(
            {"message": "duplicate key value", "code": "23505", "hint": None, "details": None}
        )
        self.client.table.return_value = builder

        with self.assertRaises(ConstraintViolation) as ctx:
            self.gateway.insert("attendance", {"user": "u", "event": 3})

        self.assertEqual(ctx.exception.kind, ConstraintKind.DUPLICATE)

    def test_full_in_message_without_code_is_not_a_constraint(self):
        builder = make_builder()
        builder.execute.side_effect = PostgrestAPIError(
            {"message": "disk full", "code": "53100", "hint": None, "details": None}
        )
        self.client.table.return_value = builder

        with self.assertRaises(GatewayError) as ctx:
            self.gateway.insert("attendance", {"user": "u", "event": 3})

        self.assertNotIsInstance(ctx.exception, ConstraintViolation)

    def test_transport_failure_becomes_gateway_error(self):
        builder = make_builder()
        builder.execute.side_effect = ConnectionError("connection reset")
        self.client.table.return_value = builder

        with self.assertRaises(GatewayError) as ctx:
            self.gateway.query("Events")

        self.assertIn("connection reset", ctx.exception.message)

    def test_delete_by_id_returns_rows_removed(self):
        builder = make_builder(data=[{"id": 5}])
        self.client.table.return_value = builder

        self.assertEqual(self.gateway.delete("attendance", 5), 1)
        builder.eq.assert_called_once_with("id", 5)

        builder.execute.return_value = MagicMock(data=[])
        self.assertEqual(self.gateway.delete("attendance", 5), 0)

    def test_update_returns_rows_changed(self):
        builder = make_builder(data=[{"id": 2}])
        self.client.table.return_value = builder

        self.assertEqual(self.gateway.update("Events", 2, {"Title": "New"}), 1)
        builder.update.assert_called_once_with({"Title": "New"})

    def test_count_uses_exact_count(self):
        builder = make_builder(data=[], count=4)
        self.client.table.return_value = builder

        self.assertEqual(self.gateway.count("Events", [Filter("Date", "eq", "2025-03-10")]), 4)
        builder.select.assert_called_once_with("id", count="exact")

    def test_fetch_one(self):
        self.client.table.return_value = make_builder(data=[])
        self.assertIsNone(self.gateway.fetch_one("Events", 1))


class TestGatewayAuthAndStorage(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock()
        self.gateway = Gateway(self.client)

    def test_current_identity_without_session(self):
        self.client.auth.get_session.return_value = None

        self.assertIsNone(self.gateway.current_identity())

    def test_current_identity_with_session(self):
        session = MagicMock()
        session.user.id = "abc"
        session.user.email = "a@b.c"
        self.client.auth.get_session.return_value = session

        self.assertEqual(self.gateway.current_identity(), Identity(id="abc", email="a@b.c"))

    def test_sign_in_failure_is_gateway_error(self):
        self.client.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")

        with self.assertRaises(GatewayError):
            self.gateway.sign_in("a@b.c", "wrong")

    def test_upload_returns_public_url(self):
        bucket = self.client.storage.from_.return_value
        bucket.get_public_url.return_value = "https://x.supabase.co/storage/v1/object/public/event-images/a.png"

        url = self.gateway.upload_file("event-images", "a.png", b"data", "image/png")

        self.assertTrue(url.endswith("/event-images/a.png"))
        bucket.upload.assert_called_once_with(path="a.png", file=b"data", file_options={"content-type": "image/png"})

    @patch('hall_events.clients.gateway.get_supabase')
    def test_client_is_built_lazily(self, mock_get_supabase):
        gateway = Gateway()
        mock_get_supabase.assert_not_called()

        self.assertIs(gateway.client, mock_get_supabase.return_value)
        mock_get_supabase.assert_called_once()


if __name__ == '__main__':
    unittest.main()
