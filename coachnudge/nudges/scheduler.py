"""
One scheduler tick: resolve, gate, assemble, render and dispatch every
category in turn.

A failure for one recipient is logged and counted, and the tick moves on.
A failure outside a recipient (templates, candidate lists) ends the tick
and is reported with the counts reached so far.
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from coachnudge.db.templates_repo import load_templates
from coachnudge.errors import InvalidPreferenceError
from coachnudge.models import NudgeCandidate, NudgeCategory
from coachnudge.nudges.content import assemble_content
from coachnudge.nudges.dispatcher import dispatch_nudge
from coachnudge.nudges.renderer import render_message
from coachnudge.nudges.resolver import resolve_candidates
from coachnudge.nudges.window import is_appropriate_time
from coachnudge.utils.logging import log
from coachnudge.utils.validation import validate_preference

CATEGORY_ORDER = (
    NudgeCategory.DAILY_DIGEST,
    NudgeCategory.WEEKLY_DIGEST,
    NudgeCategory.GOAL_CHECKIN,
    NudgeCategory.SESSION_PREP,
)

RESULT_FIELDS = {
    NudgeCategory.DAILY_DIGEST: "dailyDigestsSent",
    NudgeCategory.WEEKLY_DIGEST: "weeklyDigestsSent",
    NudgeCategory.GOAL_CHECKIN: "goalCheckinsSent",
    NudgeCategory.SESSION_PREP: "sessionPrepsSent",
}

MAX_POOL_SIZE = 20


class RunResults:
    """Per-category send counts plus the error count, safe to bump from workers."""

    def __init__(self):
        self._counts = {name: 0 for name in RESULT_FIELDS.values()}
        self._counts["errors"] = 0
        self._lock = threading.Lock()

    def increment(self, name: str) -> None:
        with self._lock:
            self._counts[name] += 1

    def __getitem__(self, name: str) -> int:
        return self._counts[name]

    def to_dict(self) -> dict:
        with self._lock:
            return dict(self._counts)


@dataclass
class SchedulerReport:
    success: bool
    results: dict
    duration_seconds: float
    error: Optional[str] = None

    def to_dict(self) -> dict:
        body = {
            "success": self.success,
            "results": self.results,
            "duration": f"{self.duration_seconds:.2f}s",
        }
        if self.error:
            body["error"] = "Scheduler failed"
            body["details"] = self.error
        return body


def process_candidate(ctx, candidate: NudgeCandidate) -> bool:
    """
    Run one candidate through gate, content, render and dispatch.
    Returns True when a nudge was sent and recorded. Raises on failure.
    """
    pref = candidate.preference
    if not is_appropriate_time(pref.preferred_time, pref.timezone, ctx.now):
        return False

    is_valid, error_msg = validate_preference(pref)
    if not is_valid:
        raise InvalidPreferenceError(error_msg)

    if not ctx.claim((candidate.email, candidate.category.value, candidate.period_key)):
        return False

    variables = assemble_content(ctx, candidate)
    if variables is None:
        log("Scheduler", f"Nothing to send for {candidate.category.value} to {candidate.email}")
        return False

    blocks, text = render_message(candidate.category, variables, ctx.templates)
    return dispatch_nudge(ctx, candidate, blocks, text) is not None


def run_category(ctx, category: NudgeCategory, results: RunResults) -> None:
    candidates = resolve_candidates(ctx, category)
    if not candidates:
        return
    log("Scheduler", f"Processing {len(candidates)} {category.value} candidates")

    def work(candidate: NudgeCandidate) -> None:
        try:
            if process_candidate(ctx, candidate):
                results.increment(RESULT_FIELDS[category])
                log("Scheduler", f"Sent {category.value} to {candidate.email}", "SUCCESS")
        except Exception as e:
            results.increment("errors")
            log("Scheduler", f"Error processing {category.value} for {candidate.email}: {e}", "ERROR")

    workers = min(ctx.settings.max_workers, MAX_POOL_SIZE)
    if workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(work, candidates))
    else:
        for candidate in candidates:
            work(candidate)


def run_scheduler(ctx) -> SchedulerReport:
    start = time.monotonic()
    results = RunResults()

    try:
        ctx.templates = load_templates(ctx.db)
        for category in CATEGORY_ORDER:
            run_category(ctx, category, results)
    except Exception as e:
        log("Scheduler", f"Nudge scheduler error: {e}", "ERROR", exc_info=True)
        return SchedulerReport(False, results.to_dict(), time.monotonic() - start, error=str(e))

    report = SchedulerReport(True, results.to_dict(), time.monotonic() - start)
    log("Scheduler", "=" * 40)
    log("Scheduler", "Nudge Scheduler Complete")
    log("Scheduler", f"Daily digests sent: {results['dailyDigestsSent']}")
    log("Scheduler", f"Weekly digests sent: {results['weeklyDigestsSent']}")
    log("Scheduler", f"Goal check-ins sent: {results['goalCheckinsSent']}")
    log("Scheduler", f"Session preps sent: {results['sessionPrepsSent']}")
    log("Scheduler", f"Errors: {results['errors']}")
    log("Scheduler", f"Duration: {report.duration_seconds:.2f}s")
    log("Scheduler", "=" * 40)
    return report
