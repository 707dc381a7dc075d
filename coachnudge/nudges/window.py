from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from coachnudge.utils.logging import log

WINDOW_HOURS = 1


def local_time(now: datetime, tz_name: Optional[str]) -> datetime:
    """
    now converted to tz_name. Raises on a missing or unknown timezone.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name))


def local_time_or_utc(now: datetime, tz_name: Optional[str]) -> datetime:
    try:
        return local_time(now, tz_name)
    except Exception:
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)


def is_appropriate_time(preferred_time: Optional[str], tz_name: Optional[str], now: datetime) -> bool:
    """
    True when now falls within WINDOW_HOURS of the recipient's preferred local hour.
    Any bad preference data (timezone or time) permits the send.
    """
    try:
        current_hour = local_time(now, tz_name).hour
        preferred_hour = int(str(preferred_time).split(":")[0])
        return abs(current_hour - preferred_hour) <= WINDOW_HOURS
    except Exception as e:
        log("Window", f"Unusable time preference ({preferred_time!r}, {tz_name!r}): {e}. Allowing send.", "WARNING")
        return True
