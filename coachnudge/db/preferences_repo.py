from typing import Optional

from coachnudge.errors import StoreError
from coachnudge.models import RecipientPreference

TABLE = "employee_slack_connections"
PREFERENCE_COLUMNS = (
    "employee_email, slack_user_id, slack_dm_channel_id, slack_team_id, "
    "nudge_enabled, nudge_frequency, preferred_time, timezone"
)


def list_enabled_by_frequency(db, frequency: str) -> list[RecipientPreference]:
    """
    All recipients with nudges switched on and the given frequency.
    """
    try:
        response = db.table(TABLE)\
            .select(PREFERENCE_COLUMNS)\
            .eq("nudge_enabled", True)\
            .eq("nudge_frequency", frequency)\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load {frequency} recipients: {e}") from e

    return [RecipientPreference.from_row(row) for row in (response.data or [])]


def get_preference(db, email: str) -> Optional[RecipientPreference]:
    try:
        response = db.table(TABLE)\
            .select(PREFERENCE_COLUMNS)\
            .ilike("employee_email", email)\
            .limit(1)\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load preferences for {email}: {e}") from e

    if response.data and len(response.data) > 0:
        return RecipientPreference.from_row(response.data[0])
    return None


def get_bot_token(db, team_id: str) -> Optional[str]:
    """
    Bot token of the workspace installation for team_id, if any.
    """
    try:
        response = db.table("slack_installations")\
            .select("bot_token")\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load installation for team {team_id}: {e}") from e

    if response.data and len(response.data) > 0:
        return response.data[0].get("bot_token") or None
    return None
