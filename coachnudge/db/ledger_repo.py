from datetime import datetime
from typing import Optional

from postgrest.exceptions import APIError

from coachnudge.errors import DuplicateNudgeError, StoreError
from coachnudge.models import NudgeCategory, NudgeLedgerEntry
from coachnudge.utils.logging import log

TABLE = "slack_nudges"
UNIQUE_VIOLATION = "23505"


def has_nudge(db, email: str, category: NudgeCategory, period_key: str) -> bool:
    """
    True when a ledger entry already exists for (recipient, category, period).
    """
    try:
        response = db.table(TABLE)\
            .select("id")\
            .eq("employee_email", email.lower())\
            .eq("nudge_type", category.value)\
            .eq("period_key", period_key)\
            .limit(1)\
            .execute()
    except Exception as e:
        raise StoreError(f"Ledger lookup failed for {email}: {e}") from e
    return bool(response.data)


def record_nudge(db, entry: NudgeLedgerEntry) -> NudgeLedgerEntry:
    """
    Append a ledger row for a confirmed send.
    Raises DuplicateNudgeError when the unique key already exists.
    """
    try:
        response = db.table(TABLE).insert(entry.to_row()).execute()
    except APIError as e:
        if e.code == UNIQUE_VIOLATION:
            raise DuplicateNudgeError(
                f"{entry.category.value} already recorded for {entry.recipient_id} ({entry.period_key})"
            ) from e
        raise StoreError(f"Ledger insert failed for {entry.recipient_id}: {e}") from e
    except Exception as e:
        raise StoreError(f"Ledger insert failed for {entry.recipient_id}: {e}") from e

    if response.data:
        return NudgeLedgerEntry.from_row(response.data[0])
    return entry


def find_by_message(db, message_ts: str, channel_id: str) -> Optional[NudgeLedgerEntry]:
    try:
        response = db.table(TABLE)\
            .select("*")\
            .eq("message_ts", message_ts)\
            .eq("channel_id", channel_id)\
            .limit(1)\
            .execute()
    except Exception as e:
        raise StoreError(f"Ledger lookup failed for message {channel_id}/{message_ts}: {e}") from e

    if response.data and len(response.data) > 0:
        return NudgeLedgerEntry.from_row(response.data[0])
    return None


def record_response(db, message_ts: str, channel_id: str, response: str, responded_at: datetime) -> bool:
    """
    Attach a response to the ledger row of a sent message.
    Only an unanswered row is updated, so a repeated callback is a no-op.
    Returns True when a row changed.
    """
    try:
        result = db.table(TABLE).update({
            "response": response,
            "responded_at": responded_at.isoformat(),
        })\
            .eq("message_ts", message_ts)\
            .eq("channel_id", channel_id)\
            .is_("response", "null")\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to record nudge response for {channel_id}/{message_ts}: {e}") from e

    if not result.data:
        log("Ledger", f"No unanswered nudge for message {channel_id}/{message_ts}", "WARNING")
        return False
    return True
