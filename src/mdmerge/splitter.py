"""Split a Markdown document at its first horizontal-rule delimiter.

The region above the delimiter is expected to hold the table; the region
below is free-form text that is carried through to the output unchanged.
"""

from __future__ import annotations

import re
from typing import Optional

from .extract import is_delimiter_row, split_row
from .schema import DocumentSections


_RULE_RE = re.compile(r"^ {0,3}-{3,}[ \t]*$")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


def is_delimiter_line(line: str) -> bool:
    return bool(_RULE_RE.match(line.rstrip("\r\n")))


def _blank(line: str) -> bool:
    return not line.strip()


def _find_delimiter(lines: list[str]) -> Optional[int]:
    fence: Optional[str] = None
    in_table = False
    for i, line in enumerate(lines):
        m = _FENCE_RE.match(line)
        if fence is not None:
            if m and m.group(1)[0] == fence[0] and len(m.group(1)) >= len(fence) and not line[m.end():].strip():
                fence = None
            continue
        if m:
            fence = m.group(1)
            in_table = False
            continue

        # A table starts at a header line followed by a matching delimiter
        # row and runs until the first line that is not a row.
        above_in_table = in_table
        cells = split_row(line)
        if in_table:
            in_table = cells is not None
        else:
            in_table = (
                cells is not None
                and i + 1 < len(lines)
                and is_delimiter_row(split_row(lines[i + 1]), len(cells))
            )
        if not is_delimiter_line(line):
            continue

        # Directly under a paragraph, "---" is a heading underline, not a rule.
        above_ok = i == 0 or _blank(lines[i - 1]) or above_in_table
        below_ok = i == len(lines) - 1 or _blank(lines[i + 1])
        if above_ok and below_ok:
            return i
    return None


def split_document(text: str, source: Optional[str] = None) -> DocumentSections:
    """Split `text` at the first delimiter line.

    Only the first delimiter counts; any later ones stay verbatim in
    ``after``.  Without a delimiter, ``after`` is None and ``before`` is the
    whole text.
    """
    lines = text.splitlines(keepends=True)
    index = _find_delimiter(lines)
    if index is None:
        return DocumentSections(before=text, after=None, source=source)
    return DocumentSections(
        before="".join(lines[:index]),
        after="".join(lines[index + 1:]),
        source=source,
    )
