import unittest
from unittest.mock import MagicMock
from datetime import datetime, timezone, timedelta
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hall_events.clients.gateway import Gateway, Order
from hall_events.errors import ValidationError
from hall_events.models import Announcement
from hall_events.services import announcements

# Thursday; the week started on Monday 10 March
NOW = datetime(2025, 3, 13, 10, 0, tzinfo=timezone.utc)


def at(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestRecencyBuckets(unittest.TestCase):

    def test_buckets(self):
        cases = [
            (at(2025, 3, 13, 8, 0), "Today"),
            (at(2025, 3, 12, 23, 59), "Yesterday"),
            (at(2025, 3, 10, 9, 0), "This Week"),
            (at(2025, 3, 9, 9, 0), "Earlier This Month"),
            (at(2025, 3, 1, 0, 0), "Earlier This Month"),
            (at(2025, 2, 20, 12, 0), "Earlier This Year"),
            (at(2024, 12, 31, 12, 0), "2024"),
        ]
        for created_at, expected in cases:
            with self.subTest(created_at=created_at):
                self.assertEqual(announcements.recency_bucket(created_at, NOW), expected)

    def test_timestamps_are_compared_in_local_time(self):
        singapore = timezone(timedelta(hours=8))
        now = datetime(2025, 3, 13, 7, 0, tzinfo=singapore)

        # 23:30 UTC on the 12th is already the 13th in UTC+8
        self.assertEqual(announcements.recency_bucket(at(2025, 3, 12, 23, 30), now), "Today")

    def test_group_preserves_order_and_skips_undated(self):
        items = [
            Announcement(1, "a", "x", at(2025, 3, 13, 9, 0)),
            Announcement(2, "b", "x", at(2025, 3, 13, 7, 0)),
            Announcement(3, "c", "x", at(2025, 3, 11, 7, 0)),
            Announcement(4, "d", "x", None),
        ]

        groups = announcements.group_by_recency(items, NOW)

        self.assertEqual(list(groups), ["Today", "This Week"])
        self.assertEqual([a.id for a in groups["Today"]], [1, 2])


class TestAnnouncementStore(unittest.TestCase):

    def setUp(self):
        self.gateway = MagicMock(spec=Gateway)

    def test_fetch_newest_first(self):
        self.gateway.query.return_value = [
            {"id": 2, "title": "B", "message": "m", "created_at": "2025-03-13T09:00:00+00:00"},
            {"id": 1, "title": "A", "message": "m", "created_at": "2025-03-12T09:00:00+00:00"},
        ]

        items = announcements.fetch_announcements(self.gateway)

        self.assertEqual([a.id for a in items], [2, 1])
        self.assertEqual(self.gateway.query.call_args.kwargs["ordering"], [Order("created_at", ascending=False)])

    def test_post_requires_both_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            announcements.post_announcement(self.gateway, "Water cut", "   ")

        self.assertEqual(ctx.exception.field, "message")
        self.gateway.insert.assert_not_called()

    def test_post_inserts_trimmed_fields(self):
        self.gateway.insert.return_value = {"id": 3, "title": "Water cut", "message": "Block A, 2-4pm"}

        item = announcements.post_announcement(self.gateway, " Water cut ", "Block A, 2-4pm\n")

        self.assertEqual(item.id, 3)
        self.gateway.insert.assert_called_once_with(
            "Announcements", {"title": "Water cut", "message": "Block A, 2-4pm"}
        )


if __name__ == '__main__':
    unittest.main()
