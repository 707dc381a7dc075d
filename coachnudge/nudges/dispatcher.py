from typing import Optional

from coachnudge.db import ledger_repo, preferences_repo
from coachnudge.errors import DuplicateNudgeError, MissingCredentialError
from coachnudge.models import NudgeCandidate, NudgeLedgerEntry
from coachnudge.utils.logging import log


def resolve_bot_token(ctx, team_id: Optional[str]) -> str:
    """
    Bot token of the workspace team_id belongs to, cached for the invocation.
    Raises MissingCredentialError when the workspace has no installation.
    """
    if not team_id:
        raise MissingCredentialError("No Slack workspace bound to recipient")
    if team_id in ctx.token_cache:
        return ctx.token_cache[team_id]

    token = preferences_repo.get_bot_token(ctx.db, team_id)
    if not token:
        raise MissingCredentialError(f"No Slack installation for team {team_id}")
    ctx.token_cache[team_id] = token
    return token


def dispatch_nudge(ctx, candidate: NudgeCandidate, blocks: list, text: str) -> Optional[NudgeLedgerEntry]:
    """
    Send one nudge and append its ledger entry.
    Returns the entry, or None when a concurrent run already recorded this key.
    Send failures raise; nothing is written to the ledger for them.
    """
    pref = candidate.preference
    token = resolve_bot_token(ctx, pref.team_id)
    sent = ctx.slack.post_message(token, pref.dm_channel_id, blocks, text)

    entry = NudgeLedgerEntry(
        recipient_id=candidate.email,
        category=candidate.category,
        period_key=candidate.period_key,
        message_ts=sent["ts"],
        channel_id=sent["channel"],
        reference_id=candidate.reference_id,
        reference_kind=candidate.reference_kind,
        sent_at=ctx.now,
    )
    try:
        return ledger_repo.record_nudge(ctx.db, entry)
    except DuplicateNudgeError as e:
        log("Dispatcher", f"Ledger already holds this nudge: {e}", "WARNING")
        return None
