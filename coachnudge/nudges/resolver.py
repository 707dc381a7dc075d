"""
Eligibility and dedup: who may receive a given category on this tick.

Digest recipients come from their frequency setting; check-in and
session-prep recipients come from session data. Anyone with a ledger entry
for the current period is dropped here, by query, so a restarted or
repeated tick never re-selects them.
"""
from datetime import timedelta

from coachnudge.db import content_repo, ledger_repo, preferences_repo
from coachnudge.models import NudgeCandidate, NudgeCategory, NudgeFrequency
from coachnudge.nudges.periods import is_monday, period_key
from coachnudge.utils.logging import log

GOAL_CHECKIN_MIN_DAYS = 3
GOAL_CHECKIN_MAX_DAYS = 4

DIGEST_FREQUENCIES = {
    NudgeCategory.DAILY_DIGEST: NudgeFrequency.DAILY,
    NudgeCategory.WEEKLY_DIGEST: NudgeFrequency.WEEKLY,
}


def _resolve_digest(ctx, category: NudgeCategory) -> list[NudgeCandidate]:
    frequency = DIGEST_FREQUENCIES[category]
    preferences = preferences_repo.list_enabled_by_frequency(ctx.db, frequency.value)

    candidates = []
    for pref in preferences:
        if not pref.email:
            log("Resolver", f"Skipping {category.value} preference row without an email", "WARNING")
            continue
        if category == NudgeCategory.WEEKLY_DIGEST and not is_monday(ctx.now, pref.timezone):
            continue
        key = period_key(category, ctx.now, pref.timezone)
        if ledger_repo.has_nudge(ctx.db, pref.email, category, key):
            continue
        candidates.append(NudgeCandidate(
            category=category,
            preference=pref,
            period_key=key,
            reference_kind="action_items",
        ))
    return candidates


def _employee_of(session: dict) -> dict:
    employee = session.get("employee_manager") or {}
    # PostgREST embeds a to-one relation as an object, older setups as a list
    if isinstance(employee, list):
        employee = employee[0] if employee else {}
    return employee


def _resolve_sessions(ctx, category: NudgeCategory, sessions: list[dict]) -> list[NudgeCandidate]:
    candidates = []
    for session in sessions:
        employee = _employee_of(session)
        email = (employee.get("company_email") or "").strip()
        if not email or session.get("id") is None:
            continue

        key = period_key(category, ctx.now, reference_id=session["id"])
        if ledger_repo.has_nudge(ctx.db, email, category, key):
            continue

        pref = preferences_repo.get_preference(ctx.db, email)
        if pref is None or not pref.enabled or pref.frequency == NudgeFrequency.NONE.value:
            continue

        candidates.append(NudgeCandidate(
            category=category,
            preference=pref,
            period_key=key,
            reference_id=key,
            reference_kind="session",
            first_name=employee.get("first_name"),
            session=session,
        ))
    return candidates


def resolve_candidates(ctx, category: NudgeCategory) -> list[NudgeCandidate]:
    """
    Candidates for category at ctx.now, already filtered for dedup.
    Store failures propagate: without the candidate list the tick cannot proceed.
    """
    if category in DIGEST_FREQUENCIES:
        return _resolve_digest(ctx, category)

    today = ctx.now.date()
    if category == NudgeCategory.GOAL_CHECKIN:
        sessions = content_repo.list_completed_sessions_between(
            ctx.db,
            today - timedelta(days=GOAL_CHECKIN_MAX_DAYS),
            today - timedelta(days=GOAL_CHECKIN_MIN_DAYS),
        )
    else:
        sessions = content_repo.list_upcoming_sessions_on(ctx.db, today + timedelta(days=1))

    if sessions:
        log("Resolver", f"Found {len(sessions)} sessions for {category.value}")
    return _resolve_sessions(ctx, category, sessions)
