"""Serialize tables and merged documents back to Markdown."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from .schema import DocumentSections, Table


SECTION_RULE = "---"

# Characters inline flattening would consume; pipes are left alone.
_MARKUP_RE = re.compile(r"([\\*_~`\[\]<>!])")


def _escape(cell: str) -> str:
    return _MARKUP_RE.sub(r"\\\1", cell)


def _line(cells: Iterable[str]) -> str:
    return "| " + " | ".join(_escape(cell) for cell in cells) + " |"


def render_table(table: Table) -> str:
    """Render `table` as a pipe table, without a trailing newline.

    Markdown markup characters in cells are backslash-escaped so the cell
    text parses back unchanged.  Pipes and newlines are not escaped, so
    cells holding them do not survive a parse round trip.
    """
    lines = [_line(table.headers), "|" + " --- |" * len(table.headers)]
    lines.extend(_line(row) for row in table.rows)
    return "\n".join(lines)


def _trim_blank_lines(text: str) -> str:
    lines = text.splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def compose_document(
    table: Optional[Table],
    trailing: Iterable[DocumentSections],
    include_source_annotations: bool = False,
) -> str:
    """Build the output document: merged table, a rule, then trailing text.

    Sections are separated by one blank line.  Documents without trailing
    content are skipped; with annotations on, each trailing region is
    preceded by an HTML comment naming the file it came from.
    """
    parts: list[str] = []
    if table is not None:
        parts.append(render_table(table))
    parts.append(SECTION_RULE)

    for sections in trailing:
        if not sections.has_trailing_content:
            continue
        body = _trim_blank_lines(sections.after or "")
        if include_source_annotations and sections.source:
            body = f"<!-- Source: {sections.source} -->\n{body}"
        parts.append(body)

    return "\n\n".join(parts) + "\n"
