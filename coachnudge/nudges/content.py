"""
Content assembly: the facts each nudge category needs, as a flat map of
named values for the renderer. No presentation markup is produced here.
A None result means the nudge should be skipped.
"""
from typing import Optional

from coachnudge.db import content_repo
from coachnudge.models import NudgeCandidate, NudgeCategory

MAX_DIGEST_ITEMS = 5
DEFAULT_FIRST_NAME = "there"
DEFAULT_COACH_NAME = "your coach"


def assemble_digest(ctx, candidate: NudgeCandidate) -> Optional[dict]:
    actions = content_repo.list_pending_actions(ctx.db, candidate.email, limit=MAX_DIGEST_ITEMS)
    if not actions:
        return None

    first_name = candidate.first_name or content_repo.get_first_name(ctx.db, candidate.email)
    items = [
        {
            "id": str(a["id"]),
            "action_text": a.get("action_text") or "",
            "coach_name": a.get("coach_name") or "",
        }
        for a in actions
    ]
    return {
        "first_name": first_name or DEFAULT_FIRST_NAME,
        "action_items": items,
        "actions_list": "\n".join(f"{i}. {item['action_text']}" for i, item in enumerate(items, start=1)),
        "action_count": len(items),
        "action_plural": "s" if len(items) > 1 else "",
        "portal_url": ctx.settings.portal_url,
    }


def assemble_goal_checkin(ctx, candidate: NudgeCandidate) -> Optional[dict]:
    session = candidate.session or {}
    goals = (session.get("goals") or "").strip()
    if not goals:
        return None
    return {
        "first_name": candidate.first_name or DEFAULT_FIRST_NAME,
        "coach_name": session.get("coach_name") or DEFAULT_COACH_NAME,
        "goals": goals,
        "session_id": str(session.get("id")),
    }


def assemble_session_prep(ctx, candidate: NudgeCandidate) -> Optional[dict]:
    # Re-read: the session may have been cancelled or moved since it was listed
    session = content_repo.get_session(ctx.db, candidate.reference_id)
    if not session or session.get("status") != "Upcoming":
        return None
    return {
        "first_name": candidate.first_name or DEFAULT_FIRST_NAME,
        "coach_name": session.get("coach_name") or DEFAULT_COACH_NAME,
        "session_id": str(session.get("id")),
        "portal_url": ctx.settings.portal_url,
    }


ASSEMBLERS = {
    NudgeCategory.DAILY_DIGEST: assemble_digest,
    NudgeCategory.WEEKLY_DIGEST: assemble_digest,
    NudgeCategory.GOAL_CHECKIN: assemble_goal_checkin,
    NudgeCategory.SESSION_PREP: assemble_session_prep,
}


def assemble_content(ctx, candidate: NudgeCandidate) -> Optional[dict]:
    return ASSEMBLERS[candidate.category](ctx, candidate)
