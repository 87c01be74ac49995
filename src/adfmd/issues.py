"""Display text for Jira issues whose rich-text fields are ADF documents.

Payloads are the plain dictionaries returned by the Jira REST API; nothing
here performs network access.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Sequence

from .converter import DocumentConverter
from .formatting import format_boxed, format_with_emoji

NO_TESTING_INSTRUCTIONS = "No specific testing instructions found."
NO_CHANGELOG = "No changelog available."

# Custom fields that hold testing instructions, in lookup order.
TESTING_FIELDS = ("customfield_10087", "customfield_10093", "customfield_10077")

_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)


def _fields(issue: Mapping[str, Any]) -> Mapping[str, Any]:
    fields = issue.get("fields")
    return fields if isinstance(fields, Mapping) else {}


def _display_name(value: Any, default: str) -> str:
    if isinstance(value, Mapping):
        name = value.get("displayName")
        if isinstance(name, str) and name:
            return name
    return default


def _named(value: Any, default: str) -> str:
    if isinstance(value, Mapping):
        name = value.get("name")
        if isinstance(name, str) and name:
            return name
    return default


def format_date(value: str) -> str:
    """Render an ISO timestamp as ``"Jan 2, 2006 at 3:04 PM"``.

    Values in an unknown format are returned unchanged.
    """

    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except (TypeError, ValueError):
            continue
        hour = parsed.hour % 12 or 12
        meridiem = "AM" if parsed.hour < 12 else "PM"
        return f"{parsed:%b} {parsed.day}, {parsed.year} at {hour}:{parsed:%M} {meridiem}"
    return value


def issue_url(base_url: str, key: str) -> str:
    """Return the browser link for issue ``key``."""

    return f"{base_url}/browse/{key}"


def add_footer(key: str, base_url: str) -> str:
    """Return the divider and link appended after issue output."""

    return "\n\n--------\n" + format_with_emoji(issue_url(base_url, key), "url")


def issue_comments(issue: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Return the comment payloads of ``issue``.

    Accepts both the REST shape (``fields.comment.comments``) and a flattened
    ``fields.comments`` list.
    """

    fields = _fields(issue)
    block = fields.get("comment", fields.get("comments"))
    if isinstance(block, Mapping):
        block = block.get("comments")
    if not isinstance(block, Sequence) or isinstance(block, (str, bytes)):
        return []
    return [comment for comment in block if isinstance(comment, Mapping)]


def format_comment(comment: Mapping[str, Any], converter: DocumentConverter | None = None) -> str:
    """Return one comment as a bold author line followed by its body."""

    converter = converter or DocumentConverter()
    author = _display_name(comment.get("author"), "")
    created = comment.get("created") or ""
    lines = f"**{author}** ({format_date(created)})\n"
    body = converter.convert(comment.get("body"))
    if body:
        lines += body + "\n"
    return lines


def _format_comment_list(
    comments: Sequence[Mapping[str, Any]], converter: DocumentConverter
) -> str:
    return "\n".join(format_comment(comment, converter) for comment in comments)


def format_comments_only(
    issue: Mapping[str, Any], converter: DocumentConverter | None = None
) -> str:
    """Return the comment listing for ``issue``."""

    converter = converter or DocumentConverter()
    output = f"{format_with_emoji('Comments for', 'file')} {issue.get('key', '')}:\n\n"
    comments = issue_comments(issue)
    if not comments:
        return output + "No comments.\n"
    return output + _format_comment_list(comments, converter)


def testing_instructions(
    issue: Mapping[str, Any],
    converter: DocumentConverter | None = None,
    fields: Sequence[str] = TESTING_FIELDS,
) -> str:
    """Return the first non-empty testing-instruction field as Markdown."""

    converter = converter or DocumentConverter()
    issue_fields = _fields(issue)
    for field_id in fields:
        value = issue_fields.get(field_id)
        if value is None:
            continue
        instructions = converter.convert(value)
        if instructions and instructions != converter.settings.empty_placeholder:
            return instructions
    return NO_TESTING_INSTRUCTIONS


def format_testing_only(
    issue: Mapping[str, Any], converter: DocumentConverter | None = None
) -> str:
    """Return the issue heading followed by its testing instructions only."""

    fields = _fields(issue)
    header = f"# {issue.get('key', '')}: {fields.get('summary', '')} (Testing Instructions)\n\n"
    return header + testing_instructions(issue, converter)


def _issue_header(issue: Mapping[str, Any]) -> str:
    fields = _fields(issue)
    title = f"{issue.get('key', '')}: {fields.get('summary', '')}"
    status = _named(fields.get("status"), "Unknown")
    assignee = _display_name(fields.get("assignee"), "Unassigned")
    reporter = _display_name(fields.get("reporter"), "Unknown")
    status_line = " | ".join(
        [
            f"Status: {status}",
            format_with_emoji(f"Assignee: {assignee}", "user"),
            format_with_emoji(f"Reporter: {reporter}", "user"),
        ]
    )
    return format_boxed(format_with_emoji(title, "ticket")) + "\n\n" + status_line + "\n\n"


def format_issue(
    issue: Mapping[str, Any],
    *,
    base_url: str,
    show_comments: bool = False,
    show_testing: bool = False,
    converter: DocumentConverter | None = None,
) -> str:
    """Return the full display text for ``issue``.

    The layout is a boxed title, a status line, the rendered description,
    optional comment and testing sections and a link footer.
    """

    converter = converter or DocumentConverter()
    fields = _fields(issue)
    key = issue.get("key", "")

    parts: List[str] = [_issue_header(issue)]

    if fields.get("description") is not None:
        description = converter.convert(fields.get("description"))
        if description != converter.settings.empty_placeholder:
            parts.append(description + "\n")

    comments = issue_comments(issue)
    if show_comments and comments:
        parts.append("## Comments\n\n")
        parts.append(_format_comment_list(comments, converter))
        parts.append("\n")

    if show_testing:
        instructions = testing_instructions(issue, converter)
        if instructions != NO_TESTING_INSTRUCTIONS:
            parts.append("## Testing Instructions\n\n" + instructions + "\n")

    parts.append("\n----\n")
    parts.append(format_with_emoji(issue_url(base_url, key), "url"))
    return "".join(parts)


def format_issue_summary(issue: Mapping[str, Any], *, base_url: str) -> str:
    """Return the boxed title and status line followed directly by the link footer."""

    url = issue_url(base_url, issue.get("key", ""))
    return _issue_header(issue) + "----\n" + format_with_emoji(url, "url")


def _changelog_histories(issue: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    changelog = issue.get("changelog")
    if not isinstance(changelog, Mapping):
        return []
    histories = changelog.get("histories")
    if not isinstance(histories, list):
        return []
    return [history for history in histories if isinstance(history, Mapping)]


def format_changelog(issue: Mapping[str, Any]) -> str:
    """Return the field changes recorded in ``issue["changelog"]``.

    Each history entry becomes an author line followed by one
    ``- field: from → to`` line per changed field; entries are separated by
    a blank line.
    """

    histories = _changelog_histories(issue)
    if not histories:
        return NO_CHANGELOG

    entries = []
    for history in histories:
        author = _display_name(history.get("author"), "")
        lines = [f"**{author}** ({format_date(history.get('created') or '')})\n"]
        items = history.get("items")
        for item in items if isinstance(items, list) else []:
            if not isinstance(item, Mapping):
                continue
            lines.append(
                f"- {item.get('field') or ''}: "
                f"{item.get('fromString') or ''} → {item.get('toString') or ''}\n"
            )
        entries.append("".join(lines))

    header = f"{format_with_emoji('Changelog for', 'file')} {issue.get('key', '')}:\n\n"
    return header + "\n".join(entries)


__all__ = [
    "NO_CHANGELOG",
    "NO_TESTING_INSTRUCTIONS",
    "TESTING_FIELDS",
    "add_footer",
    "format_comment",
    "format_changelog",
    "format_comments_only",
    "format_date",
    "format_issue",
    "format_issue_summary",
    "format_testing_only",
    "issue_comments",
    "issue_url",
    "testing_instructions",
]
