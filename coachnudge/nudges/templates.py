"""
Inline message skeletons used when no default template is configured.
Placeholders use the same {{name}} syntax as the stored templates.
"""
from coachnudge.models import NudgeCategory

_ACTION_ITEM_ROW = {
    "repeat": "action_items",
    "block": {
        "type": "section",
        "block_id": "action_{{item.id}}",
        "text": {"type": "mrkdwn", "text": "☐ {{item.action_text}}"},
        "accessory": {
            "type": "button",
            "text": {"type": "plain_text", "text": "Done"},
            "action_id": "complete_action_item",
            "value": "{{item.id}}",
        },
    },
}

FALLBACK_BLOCKS = {
    NudgeCategory.DAILY_DIGEST: [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*Good morning, {{first_name}}!* :sun_small_cloud:\n\nHere's your coaching action items for today:",
            },
        },
        _ACTION_ITEM_ROW,
        {
            "type": "context",
            "elements": [{
                "type": "mrkdwn",
                "text": "{{action_count}} pending item{{action_plural}} • <{{portal_url}}|Open Portal>",
            }],
        },
    ],
    NudgeCategory.WEEKLY_DIGEST: [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*Happy Monday, {{first_name}}!* :wave:\n\nHere's your coaching focus for the week:",
            },
        },
        _ACTION_ITEM_ROW,
        {
            "type": "context",
            "elements": [{
                "type": "mrkdwn",
                "text": "{{action_count}} action item{{action_plural}} to work on this week",
            }],
        },
    ],
    NudgeCategory.GOAL_CHECKIN: [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*Hey {{first_name}}!* :wave:\n\nA few days ago you set this goal with {{coach_name}}:\n\n_\"{{goals}}\"_\n\nHow's it going?",
            },
        },
        {
            "type": "actions",
            "block_id": "goal_{{session_id}}",
            "elements": [
                {"type": "button", "text": {"type": "plain_text", "text": "Going great"}, "action_id": "progress_great", "value": "{{session_id}}"},
                {"type": "button", "text": {"type": "plain_text", "text": "Slow progress"}, "action_id": "progress_slow", "value": "{{session_id}}"},
                {"type": "button", "text": {"type": "plain_text", "text": "I'm stuck"}, "action_id": "progress_stuck", "value": "{{session_id}}"},
            ],
        },
    ],
    NudgeCategory.SESSION_PREP: [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "*Hey {{first_name}}!* :calendar:\n\nYou have a coaching session with {{coach_name}} tomorrow!\n\nTake a moment to think about what you want to focus on.",
            },
        },
        {
            "type": "actions",
            "elements": [{
                "type": "button",
                "text": {"type": "plain_text", "text": "Prepare for Session"},
                "url": "{{portal_url}}",
            }],
        },
    ],
}

# Notification text shown by clients that cannot render blocks
FALLBACK_TEXT = {
    NudgeCategory.DAILY_DIGEST: "You have {{action_count}} pending coaching action items",
    NudgeCategory.WEEKLY_DIGEST: "Weekly coaching digest: {{action_count}} action items",
    NudgeCategory.GOAL_CHECKIN: "How's progress on your coaching goals?",
    NudgeCategory.SESSION_PREP: "You have a coaching session tomorrow!",
}
