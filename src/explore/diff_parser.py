"""Unified diff parsing into renderable line records."""

import re

from common.constants import NO_DIFF_SENTINEL

from .models import LineRecord

_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@")


def _is_empty_diff(text: str | None) -> bool:
    if not text:
        return True
    return text.strip().lower() == NO_DIFF_SENTINEL.lower()


def parse_diff(text: str | None) -> list[LineRecord]:
    """Parse unified diff text into an ordered list of line records.

    Hunk headers reset the running counters to one before the hunk start,
    so the next real line receives the start number. A header whose numbers
    cannot be read keeps the previous counters.

    Args:
        text: Patch text of one file, or the "No diff available" placeholder

    Returns:
        One LineRecord per input line; empty for empty or placeholder input

    Example:
        >>> [r.type for r in parse_diff("@@ -1,2 +1,2 @@\\n a\\n-b\\n+c")]
        ['header', 'context', 'deletion', 'addition']
    """
    if _is_empty_diff(text):
        return []

    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()

    records: list[LineRecord] = []
    old_line = 0
    new_line = 0

    for raw in lines:
        line = raw.rstrip("\r")

        if line.startswith("@@"):
            match = _HUNK_RE.match(line)
            if match:
                old_line = int(match.group(1)) - 1
                new_line = int(match.group(2)) - 1
            records.append(LineRecord(type="header", content=line))
        elif line.startswith("+"):
            new_line += 1
            records.append(LineRecord(type="addition", content=line[1:], new_line_number=new_line))
        elif line.startswith("-"):
            old_line += 1
            records.append(LineRecord(type="deletion", content=line[1:], old_line_number=old_line))
        else:
            old_line += 1
            new_line += 1
            records.append(
                LineRecord(
                    type="context",
                    content=line[1:],
                    old_line_number=old_line,
                    new_line_number=new_line,
                )
            )

    return records


def diff_line_css_class(record: LineRecord) -> str:
    """CSS class a view should attach to the rendered line."""
    return {
        "addition": "diff-addition",
        "deletion": "diff-deletion",
        "header": "diff-hunk",
    }.get(record.type, "diff-context")


def diff_marker(record: LineRecord) -> str:
    """Gutter marker for the line (the character stripped while parsing)."""
    return {"addition": "+", "deletion": "-", "header": ""}.get(record.type, " ")
