from datetime import date, datetime
from typing import Optional

from coachnudge.errors import StoreError

SESSION_COLUMNS = "id, employee_id, session_date, status, goals, coach_name, employee_manager!inner(company_email, first_name)"


def list_pending_actions(db, email: str, limit: int = 5) -> list[dict]:
    """
    Newest pending action items for email.
    Returns: [{"id": ..., "action_text": ..., "coach_name": ..., "created_at": ...}, ...]
    """
    try:
        response = db.table("action_items")\
            .select("id, action_text, coach_name, created_at")\
            .ilike("email", email)\
            .eq("status", "pending")\
            .order("created_at", desc=True)\
            .limit(limit)\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load action items for {email}: {e}") from e
    return response.data or []


def get_first_name(db, email: str) -> Optional[str]:
    try:
        response = db.table("employee_manager")\
            .select("first_name")\
            .ilike("company_email", email)\
            .limit(1)\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load employee {email}: {e}") from e

    if response.data and len(response.data) > 0:
        return response.data[0].get("first_name")
    return None


def list_completed_sessions_between(db, start: date, end: date) -> list[dict]:
    """
    Completed sessions dated within [start, end] that carry a goal statement.
    """
    try:
        response = db.table("session_tracking")\
            .select(SESSION_COLUMNS)\
            .eq("status", "Completed")\
            .gte("session_date", start.isoformat())\
            .lte("session_date", end.isoformat())\
            .not_.is_("goals", "null")\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load completed sessions: {e}") from e
    return response.data or []


def list_upcoming_sessions_on(db, day: date) -> list[dict]:
    try:
        response = db.table("session_tracking")\
            .select(SESSION_COLUMNS)\
            .eq("status", "Upcoming")\
            .eq("session_date", day.isoformat())\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load upcoming sessions: {e}") from e
    return response.data or []


def get_session(db, session_id) -> Optional[dict]:
    try:
        response = db.table("session_tracking")\
            .select("id, status, session_date, goals, coach_name")\
            .eq("id", session_id)\
            .limit(1)\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load session {session_id}: {e}") from e

    if response.data and len(response.data) > 0:
        return response.data[0]
    return None


def complete_action_item(db, item_id, completed_at: datetime) -> bool:
    """
    Flip a pending action item to completed.
    Returns False when the item was already completed (or does not exist).
    """
    try:
        response = db.table("action_items").update({
            "status": "completed",
            "completed_at": completed_at.isoformat(),
        })\
            .eq("id", item_id)\
            .eq("status", "pending")\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to complete action item {item_id}: {e}") from e
    return bool(response.data)
