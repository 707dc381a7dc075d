from coachnudge.models import RecipientPreference


def validate_preference(pref: RecipientPreference) -> tuple[bool, str]:
    """
    Validates that a preference row can be used to reach its recipient.
    Returns (is_valid: bool, error_message: str).
    Time and timezone are not checked here; the time window fails open on them.
    """
    if not isinstance(pref, RecipientPreference):
        return False, "Preference is not a RecipientPreference"
    if not pref.email or "@" not in pref.email:
        return False, f"Invalid recipient email: {pref.email!r}"
    if not pref.dm_channel_id:
        return False, f"Missing Slack DM channel for {pref.email}"
    if not pref.team_id:
        return False, f"Missing Slack workspace for {pref.email}"
    return True, ""


def validate_interaction_payload(payload: dict) -> tuple[bool, str]:
    """
    Validates the parts of an interaction payload the reconciler relies on.
    Returns (is_valid: bool, error_message: str).
    """
    if not isinstance(payload, dict):
        return False, "Payload is not a dictionary"
    if not isinstance(payload.get("type"), str):
        return False, "Missing payload type"
    if payload["type"] != "block_actions":
        return True, ""

    actions = payload.get("actions")
    if not isinstance(actions, list) or not actions or not isinstance(actions[0], dict):
        return False, "block_actions payload without actions"
    if not actions[0].get("action_id"):
        return False, "Action without action_id"

    for key, field in (("team", "id"), ("channel", "id"), ("message", "ts")):
        section = payload.get(key)
        if not isinstance(section, dict) or not section.get(field):
            return False, f"Missing {key}.{field}"
    return True, ""
