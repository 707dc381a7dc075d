"""
Block Kit rewrites applied when a user answers a nudge.
"""
import copy

PENDING_MARK = "☐"
DONE_MARK = "✅"
ACTION_BLOCK_PREFIX = "action_"

PROGRESS_REPLIES = {
    "progress_great": (":rocket:", "Awesome! Keep that momentum going!"),
    "progress_slow": (":turtle:", "Progress is progress! Every step counts."),
    "progress_stuck": (":construction:", "That's okay - bring this to your next session. Your coach can help."),
}


def _section_text(block: dict) -> str:
    return (block.get("text") or {}).get("text") or ""


def update_blocks_with_completion(blocks: list, completed_item_id: str) -> list:
    """
    Mark one action item of a digest as done.
    The item's section loses its button and gets struck through, every other
    block is kept, and the trailing counter is rebuilt from the result.
    Applying it twice for the same item gives the same blocks.
    """
    updated = []
    completed = 0
    pending = 0

    for block in blocks:
        block_id = block.get("block_id") or ""
        if block.get("type") == "section" and block_id.startswith(ACTION_BLOCK_PREFIX):
            item_id = block_id[len(ACTION_BLOCK_PREFIX):]
            text = _section_text(block)
            if text.startswith(DONE_MARK):
                updated.append(copy.deepcopy(block))
                completed += 1
            elif item_id == str(completed_item_id):
                item_text = text.replace(f"{PENDING_MARK} ", "", 1)
                updated.append({
                    "type": "section",
                    "block_id": block_id,
                    "text": {"type": "mrkdwn", "text": f"{DONE_MARK} ~{item_text}~ Done!"},
                })
                completed += 1
            else:
                updated.append(copy.deepcopy(block))
                pending += 1
        elif block.get("type") == "context":
            # rebuilt below
            continue
        else:
            updated.append(copy.deepcopy(block))

    updated.append(counter_block(pending, completed))
    return updated


def counter_block(pending: int, completed: int) -> dict:
    if pending > 0:
        text = f"{pending} pending • {completed} completed"
    else:
        text = f"🎉 All done! {completed} item{'s' if completed != 1 else ''} completed"
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": text}]}


def action_done_blocks() -> list:
    return [{
        "type": "section",
        "text": {"type": "mrkdwn", "text": f":white_check_mark: *Done!* Nice work completing your action item."},
    }]


def progress_reply_blocks(action_id: str) -> list:
    emoji, message = PROGRESS_REPLIES[action_id]
    return [{
        "type": "section",
        "text": {"type": "mrkdwn", "text": f"{emoji} *Thanks for checking in!* {message}"},
    }]
