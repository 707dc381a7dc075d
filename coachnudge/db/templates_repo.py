from coachnudge.errors import StoreError
from coachnudge.models import NudgeCategory
from coachnudge.utils.logging import log


def load_templates(db) -> dict:
    """
    Default message templates keyed by category.
    Returns {NudgeCategory: [block, ...]}. Unknown categories and rows
    without a block list are ignored.
    """
    try:
        response = db.table("nudge_templates")\
            .select("nudge_type, message_blocks")\
            .eq("is_default", True)\
            .execute()
    except Exception as e:
        raise StoreError(f"Failed to load nudge templates: {e}") from e

    templates = {}
    for row in response.data or []:
        try:
            category = NudgeCategory(row.get("nudge_type"))
        except ValueError:
            log("Templates", f"Ignoring template for unknown type {row.get('nudge_type')!r}", "WARNING")
            continue
        blocks = (row.get("message_blocks") or {}).get("blocks")
        if isinstance(blocks, list):
            templates[category] = blocks
    return templates
