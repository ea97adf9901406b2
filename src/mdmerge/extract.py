"""Extract pipe tables from Markdown text.

Tables are recognized with a line-oriented state machine following the
GitHub-Flavored-Markdown table grammar:

  | ID | Name |        <- header line
  | -- | :--: |        <- delimiter line, same cell count as the header
  | 1  | *Alice* |     <- zero or more data lines

The first line that does not look like a table row ends the table.  Lines
inside fenced code blocks are never table lines.  Cell text is flattened to
what a renderer would display (emphasis markers dropped, links reduced to
their text, code spans kept verbatim) and trimmed.

Extraction never raises on malformed Markdown; it simply finds fewer tables.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from .schema import Table


_FENCE_OPEN_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_FENCE_CLOSE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})\s*$")
_INDENTED_CODE_RE = re.compile(r"^(?: {4}|\t)")
_DELIMITER_CELL_RE = re.compile(r"^:?-+:?$")

_ESCAPABLE = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

# Escaped characters, code spans and any private-use characters already in
# the text are swapped for private-use code points while inline markup is
# stripped, then swapped back.
_ESCAPE_BASE = 0xE000
_CODE_BASE = 0xE100
_PLACEHOLDER_RE = re.compile("[\ue000-\uf8ff]")

_LINK_RULES = [
    # [text](url "title") and ![alt](src)
    (re.compile(r"!?\[([^\[\]]*)\]\(\s*[^()\s]*(?:\s+(?:\"[^\"]*\"|'[^']*'))?\s*\)"), r"\1"),
    # [text][ref]
    (re.compile(r"!?\[([^\[\]]*)\]\[[^\[\]]*\]"), r"\1"),
    # <https://...>, <mailto:...>, <user@host>
    (re.compile(r"<((?:https?|ftp)://[^\s<>]*|mailto:[^\s<>]+|[\w.+-]+@[\w-]+(?:\.[\w-]+)+)>"), r"\1"),
]

_EMPHASIS_RULES = [
    (re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*"), r"\1"),
    (re.compile(r"(?<!\w)__(?=\S)(.+?)(?<=\S)__(?!\w)"), r"\1"),
    (re.compile(r"~~(?=\S)(.+?)(?<=\S)~~"), r"\1"),
    (re.compile(r"\*(?=\S)(.+?)(?<=\S)\*"), r"\1"),
    (re.compile(r"(?<!\w)_(?=\S)(.+?)(?<=\S)_(?!\w)"), r"\1"),
]

_MAX_EMPHASIS_PASSES = 8


# ---------------------------------------------------------------------------
# Inline flattening
# ---------------------------------------------------------------------------

def _closing_backticks(text: str, start: int, run: int) -> int:
    """Index of the next backtick run of exactly `run` characters, or -1."""
    m = re.compile(r"(?<!`)`{%d}(?!`)" % run).search(text, start)
    return m.start() if m else -1


def _normalize_code_span(content: str) -> str:
    content = content.replace("\n", " ")
    if len(content) >= 2 and content[0] == " " and content[-1] == " " and content.strip():
        content = content[1:-1]
    return content


def _protect(text: str) -> tuple[str, list[str]]:
    out: list[str] = []
    spans: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in _ESCAPABLE:
            out.append(chr(_ESCAPE_BASE + ord(text[i + 1])))
            i += 2
            continue
        if _PLACEHOLDER_RE.match(ch):
            # Private-use characters already in the text ride along as
            # verbatim spans so they cannot be mistaken for placeholders.
            spans.append(ch)
            out.append(chr(_CODE_BASE + len(spans) - 1))
            i += 1
            continue
        if ch == "`":
            run = len(text[i:]) - len(text[i:].lstrip("`"))
            close = _closing_backticks(text, i + run, run)
            if close == -1:
                out.append("`" * run)
            else:
                spans.append(_normalize_code_span(text[i + run:close]))
                out.append(chr(_CODE_BASE + len(spans) - 1))
                run = close + run - i
            i += run
            continue
        out.append(ch)
        i += 1
    return "".join(out), spans


def _restore(text: str, spans: list[str]) -> str:
    def _swap(m: re.Match) -> str:
        code = ord(m.group(0))
        if code < _CODE_BASE:
            return chr(code - _ESCAPE_BASE)
        index = code - _CODE_BASE
        return spans[index] if index < len(spans) else m.group(0)

    return _PLACEHOLDER_RE.sub(_swap, text)


def flatten_inline(text: str) -> str:
    """Reduce inline Markdown to its displayed plain text, trimmed."""
    protected, spans = _protect(text)
    for pattern, repl in _LINK_RULES:
        protected = pattern.sub(repl, protected)
    for _ in range(_MAX_EMPHASIS_PASSES):
        before = protected
        for pattern, repl in _EMPHASIS_RULES:
            protected = pattern.sub(repl, protected)
        if protected == before:
            break
    return _restore(protected, spans).strip()


# ---------------------------------------------------------------------------
# Row splitting
# ---------------------------------------------------------------------------

def split_row(line: str) -> Optional[list[str]]:
    """Split a table line into raw cell strings.

    Returns None when the line cannot be a table row (blank, indented code,
    or no unescaped pipe).  A line made of a single pipe yields an empty
    list.  Escaped pipes become literal pipes inside the cell; other
    backslash escapes are left for inline flattening.
    """
    if not line.strip() or _INDENTED_CODE_RE.match(line):
        return None
    content = line.strip()

    cells: list[str] = []
    buf: list[str] = []
    found_pipe = False
    ends_with_pipe = False
    i = 0
    while i < len(content):
        ch = content[i]
        ends_with_pipe = False
        if ch == "\\" and i + 1 < len(content):
            nxt = content[i + 1]
            buf.append("|" if nxt == "|" else content[i:i + 2])
            i += 2
            continue
        if ch == "|":
            found_pipe = True
            ends_with_pipe = True
            cells.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1
    if not found_pipe:
        return None
    cells.append("".join(buf))

    if content.startswith("|"):
        cells = cells[1:]
    if ends_with_pipe and cells:
        cells = cells[:-1]
    return cells


def is_delimiter_row(cells: Optional[list[str]], width: int) -> bool:
    if not cells or len(cells) != width:
        return False
    return all(_DELIMITER_CELL_RE.match(cell.strip()) for cell in cells)


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TableExtractor:
    """Stateless pipe-table extractor.

    Construct one and pass it to whatever needs tables; every call works
    only on its own input.  Set ``plain_text=False`` to keep raw cell
    source text (trimmed) instead of the displayed text.
    """

    plain_text: bool = True

    def _cell_text(self, raw: str) -> str:
        return flatten_inline(raw) if self.plain_text else raw.strip()

    def extract_tables(self, text: Optional[str]) -> Iterator[Table]:
        """Yield every pipe table in `text`, in document order."""
        if not text:
            return
        lines = text.splitlines()
        fence: Optional[str] = None
        i = 0
        while i < len(lines):
            line = lines[i]

            if fence is not None:
                m = _FENCE_CLOSE_RE.match(line)
                if m and m.group(1)[0] == fence[0] and len(m.group(1)) >= len(fence):
                    fence = None
                i += 1
                continue
            m = _FENCE_OPEN_RE.match(line)
            if m:
                fence = m.group(1)
                i += 1
                continue

            header = split_row(line)
            if header is None or i + 1 >= len(lines) or not is_delimiter_row(split_row(lines[i + 1]), len(header)):
                i += 1
                continue

            headers = [self._cell_text(cell) for cell in header]
            rows: list[list[str]] = []
            i += 2
            while i < len(lines):
                if _FENCE_OPEN_RE.match(lines[i]):
                    break
                cells = split_row(lines[i])
                if cells is None:
                    break
                if cells:
                    rows.append([self._cell_text(cell) for cell in cells])
                i += 1

            # A header-less table has no merge key; drop it.
            if any(headers):
                yield Table(headers=headers, rows=rows)

    def first_table(self, text: Optional[str]) -> Optional[Table]:
        """The first table in `text`, or None."""
        return next(self.extract_tables(text), None)


def extract_tables(text: Optional[str]) -> list[Table]:
    """Extract all tables from `text` with a default extractor."""
    return list(TableExtractor().extract_tables(text))
