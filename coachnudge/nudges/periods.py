"""
Dedup period keys.
Daily digests dedup per local calendar day, weekly digests per ISO week
(Monday start), check-ins and session preps per referenced session.
"""
from datetime import datetime
from typing import Optional

from coachnudge.models import NudgeCategory
from coachnudge.nudges.window import local_time_or_utc


def day_key(local: datetime) -> str:
    return local.date().isoformat()


def week_key(local: datetime) -> str:
    year, week, _ = local.isocalendar()
    return f"{year}-W{week:02d}"


def period_key(category: NudgeCategory, now: datetime, tz_name: Optional[str] = None, reference_id=None) -> str:
    if category in (NudgeCategory.GOAL_CHECKIN, NudgeCategory.SESSION_PREP):
        if reference_id is None:
            raise ValueError(f"{category.value} needs a reference id")
        return str(reference_id)

    local = local_time_or_utc(now, tz_name)
    if category == NudgeCategory.DAILY_DIGEST:
        return day_key(local)
    return week_key(local)


def is_monday(now: datetime, tz_name: Optional[str] = None) -> bool:
    return local_time_or_utc(now, tz_name).weekday() == 0
