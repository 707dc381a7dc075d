import unittest
from datetime import datetime, timezone

from coachnudge.db import ledger_repo
from coachnudge.errors import StoreError
from coachnudge.models import NudgeCategory, NudgeLedgerEntry
from coachnudge.nudges.resolver import resolve_candidates

from fakes import FakeSupabase, make_context

MONDAY = datetime(2026, 10, 12, 13, 30, tzinfo=timezone.utc)
WEDNESDAY = datetime(2026, 10, 14, 13, 30, tzinfo=timezone.utc)


def record(db, email, category, key, reference_id=None):
    ledger_repo.record_nudge(db, NudgeLedgerEntry(
        recipient_id=email, category=category, period_key=key,
        message_ts="1.1", channel_id="D1", reference_id=reference_id,
    ))


class TestDigestResolution(unittest.TestCase):
    def setUp(self):
        self.db = FakeSupabase()
        self.db.add_connection("ann@example.com", frequency="daily")
        self.db.add_connection("off@example.com", frequency="daily", enabled=False)
        self.db.add_connection("wes@example.com", frequency="weekly")
        self.db.add_connection("smart@example.com", frequency="smart")

    def test_daily_selects_enabled_daily_recipients(self):
        ctx = make_context(db=self.db, now=WEDNESDAY)
        candidates = resolve_candidates(ctx, NudgeCategory.DAILY_DIGEST)
        self.assertEqual([c.email for c in candidates], ["ann@example.com"])
        self.assertEqual(candidates[0].period_key, "2026-10-14")

    def test_daily_drops_recipient_already_nudged_today(self):
        record(self.db, "ann@example.com", NudgeCategory.DAILY_DIGEST, "2026-10-14")
        ctx = make_context(db=self.db, now=WEDNESDAY)
        self.assertEqual(resolve_candidates(ctx, NudgeCategory.DAILY_DIGEST), [])

    def test_yesterdays_nudge_does_not_block_today(self):
        record(self.db, "ann@example.com", NudgeCategory.DAILY_DIGEST, "2026-10-13")
        ctx = make_context(db=self.db, now=WEDNESDAY)
        self.assertEqual(len(resolve_candidates(ctx, NudgeCategory.DAILY_DIGEST)), 1)

    def test_weekly_only_on_monday(self):
        wednesday = make_context(db=self.db, now=WEDNESDAY)
        self.assertEqual(resolve_candidates(wednesday, NudgeCategory.WEEKLY_DIGEST), [])

        monday = make_context(db=self.db, now=MONDAY)
        candidates = resolve_candidates(monday, NudgeCategory.WEEKLY_DIGEST)
        self.assertEqual([c.email for c in candidates], ["wes@example.com"])
        self.assertEqual(candidates[0].period_key, "2026-W42")

    def test_weekly_dedup_spans_the_week(self):
        record(self.db, "wes@example.com", NudgeCategory.WEEKLY_DIGEST, "2026-W42")
        ctx = make_context(db=self.db, now=MONDAY)
        self.assertEqual(resolve_candidates(ctx, NudgeCategory.WEEKLY_DIGEST), [])

    def test_store_failure_propagates(self):
        self.db.failing_tables.add("employee_slack_connections")
        with self.assertRaises(StoreError):
            resolve_candidates(make_context(db=self.db), NudgeCategory.DAILY_DIGEST)


class TestSessionResolution(unittest.TestCase):
    def setUp(self):
        self.db = FakeSupabase()
        self.db.add_connection("dan@example.com", frequency="smart")
        self.db.add_connection("quiet@example.com", frequency="none")

    def test_goal_checkin_window_is_three_to_four_days_back(self):
        too_recent = self.db.add_session("dan@example.com", "Dan", "2026-10-12", "Completed", goals="A")
        in_window = self.db.add_session("dan@example.com", "Dan", "2026-10-10", "Completed", goals="B")
        self.db.add_session("dan@example.com", "Dan", "2026-10-09", "Completed", goals="C")
        self.db.add_session("dan@example.com", "Dan", "2026-10-11", "Cancelled", goals="D")
        self.db.add_session("dan@example.com", "Dan", "2026-10-11", "Completed", goals=None)

        candidates = resolve_candidates(make_context(db=self.db, now=WEDNESDAY), NudgeCategory.GOAL_CHECKIN)

        self.assertEqual([c.reference_id for c in candidates], [str(in_window["id"])])
        self.assertNotEqual(str(too_recent["id"]), candidates[0].reference_id)
        self.assertEqual(candidates[0].period_key, str(in_window["id"]))
        self.assertEqual(candidates[0].reference_kind, "session")
        self.assertEqual(candidates[0].first_name, "Dan")

    def test_goal_checkin_dedup_by_session(self):
        session = self.db.add_session("dan@example.com", "Dan", "2026-10-10", "Completed", goals="B")
        record(self.db, "dan@example.com", NudgeCategory.GOAL_CHECKIN, str(session["id"]))
        self.assertEqual(resolve_candidates(make_context(db=self.db), NudgeCategory.GOAL_CHECKIN), [])

    def test_session_prep_selects_tomorrows_upcoming_sessions(self):
        tomorrow = self.db.add_session("dan@example.com", "Dan", "2026-10-15", "Upcoming")
        self.db.add_session("dan@example.com", "Dan", "2026-10-16", "Upcoming")
        self.db.add_session("dan@example.com", "Dan", "2026-10-15", "Cancelled")

        candidates = resolve_candidates(make_context(db=self.db), NudgeCategory.SESSION_PREP)

        self.assertEqual([c.reference_id for c in candidates], [str(tomorrow["id"])])

    def test_recipients_who_opted_out_are_skipped(self):
        self.db.add_session("quiet@example.com", "Quinn", "2026-10-15", "Upcoming")
        self.db.add_session("nobody@example.com", "Nora", "2026-10-15", "Upcoming")
        self.assertEqual(resolve_candidates(make_context(db=self.db), NudgeCategory.SESSION_PREP), [])


if __name__ == '__main__':
    unittest.main()
