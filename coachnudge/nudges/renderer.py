"""
Template rendering over block trees.

Every string leaf has its {{name}} tokens replaced; dotted names
({{item.id}}) walk into nested dicts. A list element shaped
{"repeat": "<list variable>", "block": {...}} is expanded once per entry of
that variable, with the entry bound to `item` and its 1-based position to
`index`. Nothing else about the block shape is assumed.
"""
import copy
import re

from coachnudge.models import NudgeCategory
from coachnudge.nudges.templates import FALLBACK_BLOCKS, FALLBACK_TEXT

PLACEHOLDER = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")


def _lookup(variables: dict, name: str):
    value = variables
    for part in name.split("."):
        if isinstance(value, dict):
            value = value.get(part)
        else:
            return None
    return value


def _to_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_text(text: str, variables: dict) -> str:
    return PLACEHOLDER.sub(lambda m: _to_text(_lookup(variables, m.group(1))), text)


def _expand_repeat(node: dict, variables: dict) -> list:
    items = _lookup(variables, node["repeat"]) or []
    expanded = []
    for index, item in enumerate(items, start=1):
        scope = dict(variables, item=item, index=index)
        expanded.append(render_node(node.get("block", {}), scope))
    return expanded


def render_node(node, variables: dict):
    if isinstance(node, str):
        return render_text(node, variables)
    if isinstance(node, list):
        rendered = []
        for child in node:
            if isinstance(child, dict) and "repeat" in child:
                rendered.extend(_expand_repeat(child, variables))
            else:
                rendered.append(render_node(child, variables))
        return rendered
    if isinstance(node, dict):
        return {key: render_node(value, variables) for key, value in node.items()}
    return copy.deepcopy(node)


def render_blocks(blocks: list, variables: dict) -> list:
    return render_node(blocks, variables)


def render_message(category: NudgeCategory, variables: dict, templates: dict = None) -> tuple[list, str]:
    """
    Render the configured template for category, or its inline fallback.
    Returns (blocks, notification_text).
    """
    skeleton = (templates or {}).get(category) or FALLBACK_BLOCKS[category]
    blocks = render_blocks(skeleton, variables)
    text = render_text(FALLBACK_TEXT[category], variables)
    return blocks, text
