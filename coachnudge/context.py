import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from coachnudge.config import Settings
from coachnudge.db.supabase_client import create_supabase
from coachnudge.slack.client import SlackClient


@dataclass
class NudgeContext:
    """
    Everything one invocation (scheduler tick or callback) needs.
    Built once per invocation and passed explicitly to each component.
    """
    db: Any
    slack: Any
    settings: Settings
    now: datetime
    templates: dict = field(default_factory=dict)
    token_cache: dict = field(default_factory=dict)
    claims: set = field(default_factory=set)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def claim(self, key: tuple) -> bool:
        """
        Reserve a (recipient, category, period) key for this run.
        Returns False when another worker of the same run already holds it.
        """
        with self._lock:
            if key in self.claims:
                return False
            self.claims.add(key)
            return True


def build_context(settings: Settings, now: Optional[datetime] = None) -> NudgeContext:
    return NudgeContext(
        db=create_supabase(settings),
        slack=SlackClient(base_url=settings.slack_api_base, timeout=settings.http_timeout),
        settings=settings,
        now=now or datetime.now(timezone.utc),
    )
