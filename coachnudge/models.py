"""
Domain types shared by the nudge scheduler and the interaction reconciler.
Rows coming from the store stay plain dicts until they cross into these types.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class NudgeCategory(str, Enum):
    DAILY_DIGEST = "daily_digest"
    WEEKLY_DIGEST = "weekly_digest"
    GOAL_CHECKIN = "goal_checkin"
    SESSION_PREP = "session_prep"


class NudgeFrequency(str, Enum):
    SMART = "smart"
    DAILY = "daily"
    WEEKLY = "weekly"
    NONE = "none"


# Responses a user can attach to a nudge from inside the chat client
RESPONSE_ACTIONS = frozenset({
    "complete_action_item",
    "action_done",
    "progress_great",
    "progress_slow",
    "progress_stuck",
})


@dataclass
class RecipientPreference:
    email: str
    enabled: bool
    frequency: str
    preferred_time: Optional[str]
    timezone: Optional[str]
    dm_channel_id: Optional[str]
    team_id: Optional[str]
    slack_user_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "RecipientPreference":
        return cls(
            email=(row.get("employee_email") or "").strip(),
            enabled=bool(row.get("nudge_enabled")),
            frequency=row.get("nudge_frequency") or NudgeFrequency.SMART.value,
            preferred_time=row.get("preferred_time"),
            timezone=row.get("timezone"),
            dm_channel_id=row.get("slack_dm_channel_id"),
            team_id=row.get("slack_team_id"),
            slack_user_id=row.get("slack_user_id"),
        )


@dataclass
class NudgeCandidate:
    """A recipient who survived eligibility and dedup for one category."""
    category: NudgeCategory
    preference: RecipientPreference
    period_key: str
    reference_id: Optional[str] = None
    reference_kind: str = "action_items"
    first_name: Optional[str] = None
    session: Optional[dict] = None

    @property
    def email(self) -> str:
        return self.preference.email.lower()


@dataclass
class NudgeLedgerEntry:
    recipient_id: str
    category: NudgeCategory
    period_key: str
    message_ts: str
    channel_id: str
    reference_id: Optional[str] = None
    reference_kind: Optional[str] = None
    sent_at: Optional[datetime] = None
    response: Optional[str] = None
    responded_at: Optional[datetime] = None
    id: Optional[int] = None

    def to_row(self) -> dict:
        row = {
            "employee_email": self.recipient_id.lower(),
            "nudge_type": self.category.value,
            "period_key": self.period_key,
            "reference_id": self.reference_id,
            "reference_type": self.reference_kind,
            "message_ts": self.message_ts,
            "channel_id": self.channel_id,
        }
        if self.sent_at is not None:
            row["sent_at"] = self.sent_at.isoformat()
        return row

    @classmethod
    def from_row(cls, row: dict) -> "NudgeLedgerEntry":
        return cls(
            id=row.get("id"),
            recipient_id=row.get("employee_email", ""),
            category=NudgeCategory(row["nudge_type"]),
            period_key=row.get("period_key") or "",
            message_ts=row.get("message_ts", ""),
            channel_id=row.get("channel_id", ""),
            reference_id=row.get("reference_id"),
            reference_kind=row.get("reference_type"),
            sent_at=_parse_ts(row.get("sent_at")),
            response=row.get("response"),
            responded_at=_parse_ts(row.get("responded_at")),
        )


@dataclass
class InteractionPayload:
    """The fields of a block_actions callback the reconciler acts on."""
    type: str
    action_id: Optional[str] = None
    action_value: Optional[str] = None
    block_id: str = ""
    team_id: Optional[str] = None
    channel_id: Optional[str] = None
    message_ts: Optional[str] = None
    message_blocks: list = field(default_factory=list)
    user_id: Optional[str] = None
    challenge: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: dict) -> "InteractionPayload":
        actions = payload.get("actions") or []
        action = actions[0] if actions else {}
        message = payload.get("message") or {}
        return cls(
            type=payload.get("type", ""),
            action_id=action.get("action_id"),
            action_value=action.get("value"),
            block_id=action.get("block_id") or "",
            team_id=(payload.get("team") or {}).get("id"),
            channel_id=(payload.get("channel") or {}).get("id"),
            message_ts=message.get("ts"),
            message_blocks=message.get("blocks") or [],
            user_id=(payload.get("user") or {}).get("id"),
            challenge=payload.get("challenge"),
        )


def _parse_ts(value) -> Optional[datetime]:
    if not value or isinstance(value, datetime):
        return value or None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
