"""
Closes the loop on a sent nudge when the recipient clicks one of its buttons.

Only a bad signature is refused. Anything that goes wrong after that is
logged and acknowledged, since Slack retries unacknowledged callbacks.
"""
import json
from typing import Mapping, Optional, Union
from urllib.parse import parse_qs

from coachnudge.db import content_repo, ledger_repo
from coachnudge.models import RESPONSE_ACTIONS, InteractionPayload
from coachnudge.nudges.dispatcher import resolve_bot_token
from coachnudge.slack.blocks import (
    action_done_blocks,
    progress_reply_blocks,
    update_blocks_with_completion,
)
from coachnudge.slack.signature import verify_slack_signature
from coachnudge.utils.logging import log
from coachnudge.utils.validation import validate_interaction_payload

SIGNATURE_HEADER = "x-slack-signature"
TIMESTAMP_HEADER = "x-slack-request-timestamp"


def _header(headers: Mapping[str, str], name: str) -> str:
    for key, value in headers.items():
        if key.lower() == name:
            return value or ""
    return ""


def _reference_from_block_id(block_id: str) -> Optional[str]:
    # legacy blocks are named "<kind>_<reference id>"
    parts = block_id.split("_", 1)
    return parts[1] if len(parts) == 2 and parts[1] else None


def _record_response(ctx, payload: InteractionPayload, response: str) -> None:
    entry = ledger_repo.find_by_message(ctx.db, payload.message_ts, payload.channel_id)
    if entry is None:
        log("Reconciler", f"No nudge recorded for message {payload.channel_id}/{payload.message_ts}", "WARNING")
        return
    if entry.response:
        log("Reconciler", f"Nudge {entry.id} already answered with {entry.response}")
        return
    # The acting user is a workspace id, the ledger keys by email; log both for manual matching
    log("Reconciler", f"Recording {response} for {entry.recipient_id} (acted by Slack user {payload.user_id})")
    ledger_repo.record_response(ctx.db, payload.message_ts, payload.channel_id, response, ctx.now)


def reconcile_action(ctx, payload: InteractionPayload) -> Optional[str]:
    """
    Apply a button click: domain side effect, in-place message edit, ledger response.
    Returns the response recorded, or None for an unknown action.
    Raises on any failure; later steps are then not attempted.
    """
    action_id = payload.action_id
    if action_id not in RESPONSE_ACTIONS:
        log("Reconciler", f"Unknown action: {action_id}")
        return None

    token = resolve_bot_token(ctx, payload.team_id)

    if action_id == "complete_action_item":
        item_id = payload.action_value
        if not content_repo.complete_action_item(ctx.db, item_id, ctx.now):
            log("Reconciler", f"Action item {item_id} was already completed")
        blocks = update_blocks_with_completion(payload.message_blocks, item_id)
        ctx.slack.update_message(token, payload.channel_id, payload.message_ts, blocks)

    elif action_id == "action_done":
        item_id = _reference_from_block_id(payload.block_id)
        if item_id and not content_repo.complete_action_item(ctx.db, item_id, ctx.now):
            log("Reconciler", f"Action item {item_id} was already completed")
        ctx.slack.update_message(token, payload.channel_id, payload.message_ts, action_done_blocks())

    else:
        ctx.slack.update_message(token, payload.channel_id, payload.message_ts, progress_reply_blocks(action_id))

    _record_response(ctx, payload, action_id)
    return action_id


def handle_interaction(ctx, body: Union[str, bytes], headers: Mapping[str, str]) -> tuple[int, Union[str, dict]]:
    """
    Entry point for the Slack interactivity callback.
    Returns (status_code, body) where body is "" or a JSON-able dict.
    """
    is_valid = verify_slack_signature(
        ctx.settings.slack_signing_secret,
        _header(headers, SIGNATURE_HEADER),
        _header(headers, TIMESTAMP_HEADER),
        body,
        now=ctx.now.timestamp(),
        tolerance=ctx.settings.signature_tolerance,
    )
    if not is_valid:
        log("Reconciler", "Invalid Slack signature", "ERROR")
        return 401, "Invalid signature"

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            log("Reconciler", "Interaction body is not valid UTF-8", "ERROR")
            return 400, "Invalid payload"

    payload_str = (parse_qs(body).get("payload") or [None])[0]
    if not payload_str:
        return 400, "Missing payload"
    try:
        raw = json.loads(payload_str)
    except ValueError:
        log("Reconciler", "Interaction payload is not valid JSON", "ERROR")
        return 400, "Invalid payload"

    is_valid, error_msg = validate_interaction_payload(raw)
    if not is_valid:
        log("Reconciler", f"Ignoring interaction: {error_msg}", "WARNING")
        return (400, "Invalid payload") if not isinstance(raw, dict) else (200, "")

    payload = InteractionPayload.from_dict(raw)
    if payload.type == "url_verification":
        return 200, {"challenge": payload.challenge}
    if payload.type != "block_actions":
        return 200, ""

    try:
        reconcile_action(ctx, payload)
    except Exception as e:
        log("Reconciler", f"Interaction handler error for {payload.action_id}: {e}", "ERROR", exc_info=True)
    return 200, ""
