"""Recursive ADF to Markdown renderer.

``render`` is a pure function of ``(node, depth, list_depth)``: it dispatches
on the node type through ``NODE_RENDERERS`` and falls back to concatenating
the rendered children for node types it does not know.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, Iterable

from .formatting import auto_format_emoji, format_with_emoji
from .models import DocumentNode, Mark

DEFAULT_MAX_DEPTH = 10
TRUNCATED = "[...]"
BULLET = "•"
INDENT = "  "

# Heading levels are emitted as given up to this bound; beyond it they fall back to 1.
MAX_HEADING_LEVEL = 100

MARK_WRAPPERS = {
    "strong": ("**", "**"),
    "em": ("*", "*"),
    "code": ("`", "`"),
}

# Markers that make a paragraph read as an annotated line rather than a header.
ANNOTATION_MARKERS = ("•", "✅", "❓", "🔗", "https://")

NodeRenderer = Callable[[DocumentNode, int, int, int], str]


def render(
    node: DocumentNode,
    depth: int = 0,
    list_depth: int = 0,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Render ``node`` to Markdown.

    ``depth`` grows by one per level of ``content``; once it exceeds
    ``max_depth`` the subtree is replaced by ``"[...]"``. ``list_depth`` is
    the nesting level of the enclosing list and drives item indentation.
    """

    if depth > max_depth:
        return TRUNCATED
    handler = NODE_RENDERERS.get(node.type, _render_passthrough)
    return handler(node, depth, list_depth, max_depth)


def _children(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    return "".join(
        render(child, depth + 1, list_depth, max_depth=max_depth) for child in node.content
    )


def apply_marks(text: str, marks: Iterable[Mark]) -> str:
    """Wrap ``text`` with each supported mark in order; unknown marks are skipped."""

    for mark in marks:
        wrapper = MARK_WRAPPERS.get(mark.type)
        if wrapper is None:
            continue
        opening, closing = wrapper
        text = f"{opening}{text}{closing}"
    return text


def is_header_like(text: str) -> bool:
    """Return True when ``text`` carries none of the annotation markers."""

    return not any(marker in text for marker in ANNOTATION_MARKERS)


def _render_text(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    return apply_marks(node.text, node.marks)


def _render_paragraph(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    text = _children(node, depth, list_depth, max_depth)
    # Adjacent bold runs leave "****" or "***" at their boundary.
    text = text.replace("****", "").replace("***", "*")
    text = text.strip()
    if not text:
        return ""
    if is_header_like(text):
        # Header-like lines and annotated lines currently share one layout.
        return text + "\n"
    return text + "\n"


def _render_heading(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    level = node.attr("level", (int, float))
    if level is None or abs(level) > MAX_HEADING_LEVEL or not math.isfinite(level):
        level = 1
    level = int(level)
    return "#" * level + " " + _children(node, depth, list_depth, max_depth) + "\n"


def _render_code_block(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    language = node.attr("language") or ""
    code = _children(node, depth, list_depth, max_depth)
    return f"```{language}\n{code}\n```\n"


def _render_list(
    node: DocumentNode, depth: int, list_depth: int, max_depth: int, *, ordered: bool
) -> str:
    items = []
    for position, child in enumerate(node.content, start=1):
        item = render(child, depth + 1, list_depth + 1, max_depth=max_depth)
        if ordered:
            item = f"{position}. " + item.rstrip("\n")
        items.append(item)
    return "\n".join(items)


def _render_bullet_list(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    return _render_list(node, depth, list_depth, max_depth, ordered=False)


def _render_ordered_list(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    return _render_list(node, depth, list_depth, max_depth, ordered=True)


def _render_list_item(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    content = _children(node, depth, list_depth, max_depth).rstrip("\n")
    return f"{INDENT * list_depth}{BULLET} {content}"


def _render_hard_break(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    return "\n"


def _render_mention(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    for name in ("text", "displayName"):
        value = node.attr(name)
        if value is not None:
            return value
    return "@unknown"


def _render_url(attr_name: str) -> NodeRenderer:
    def _render(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
        url = node.attr(attr_name)
        if url is None:
            return format_with_emoji("unknown", "url")
        return auto_format_emoji(url)

    return _render


def _render_image(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    src = node.attr("src")
    if not src:
        return "@image"
    alt = node.attr("alt")
    if alt is None:
        alt = "Image"
    return f"![{alt}]({src})"


def _render_emoji(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    text = node.attr("text")
    if text is not None:
        return text
    short_name = node.attr("shortName")
    if short_name is not None:
        return f":{short_name}:"
    return ":unknown:"


def _render_passthrough(node: DocumentNode, depth: int, list_depth: int, max_depth: int) -> str:
    return _children(node, depth, list_depth, max_depth)


NODE_RENDERERS: Dict[str, NodeRenderer] = {
    "text": _render_text,
    "paragraph": _render_paragraph,
    "heading": _render_heading,
    "codeBlock": _render_code_block,
    "bulletList": _render_bullet_list,
    "orderedList": _render_ordered_list,
    "listItem": _render_list_item,
    "hardBreak": _render_hard_break,
    "mention": _render_mention,
    "link": _render_url("href"),
    "inlineCard": _render_url("url"),
    "image": _render_image,
    "emoji": _render_emoji,
}


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "NODE_RENDERERS",
    "TRUNCATED",
    "apply_marks",
    "is_header_like",
    "render",
]
