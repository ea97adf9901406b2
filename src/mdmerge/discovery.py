"""Find candidate Markdown files and order them by their filename sequence.

Chunk files follow the ``<stem>_<start>_<end>.md`` convention; ``<start>``
is the sort key.  The two pipelines treat names without that suffix
differently:

  concat  -- such files are excluded.
  join    -- such files are kept when they match the marker rule, and sort
             first with key 0.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .schema import MatchRule

logger = logging.getLogger(__name__)


_NUMBER_SUFFIX_RE = re.compile(r".*_(\d+)_(\d+)\.md$")


@dataclass(frozen=True)
class SourceFile:
    path: Path
    sort_key: Optional[int]

    @property
    def name(self) -> str:
        return self.path.name


def extract_sort_key(file_name: str) -> Optional[int]:
    """Return N from a ``..._<N>_<M>.md`` name, or None."""
    m = _NUMBER_SUFFIX_RE.match(file_name)
    return int(m.group(1)) if m else None


def has_number_pattern(file_name: str) -> bool:
    return _NUMBER_SUFFIX_RE.match(file_name) is not None


def matches_rule(file_name: str, rule: MatchRule, marker: str = "test_result") -> bool:
    """Whether `file_name` qualifies as an auxiliary file under `rule`."""
    by_marker = marker in file_name
    by_number = has_number_pattern(file_name)
    if rule is MatchRule.SUBSTRING_MARKER:
        return by_marker
    if rule is MatchRule.NUMERIC_SUFFIX_ONLY:
        return by_number
    return by_marker or by_number


def list_markdown_files(directory: Path, exclude: Iterable[str] = ()) -> list[Path]:
    """Regular ``.md`` files directly inside `directory`, by name.

    Raises:
        FileNotFoundError: If `directory` does not exist.
        NotADirectoryError: If `directory` is not a directory.
    """
    directory = Path(directory)
    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    excluded = set(exclude)
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.suffix == ".md" and p.name not in excluded),
        key=lambda p: p.name,
    )


def _log_skipped(skipped: list[Path], reason: str) -> None:
    if skipped:
        logger.info("Skipping %d file(s) %s: %s", len(skipped), reason, ", ".join(p.name for p in skipped))


def find_numbered_files(directory: Path, exclude: Iterable[str] = ()) -> list[SourceFile]:
    """Chunk files for the concat pipeline, ordered by their start number."""
    found: list[SourceFile] = []
    skipped: list[Path] = []
    for path in list_markdown_files(directory, exclude):
        key = extract_sort_key(path.name)
        if key is None:
            skipped.append(path)
        else:
            found.append(SourceFile(path, key))
    _log_skipped(skipped, "without a _<N>_<M>.md suffix")
    return sorted(found, key=lambda f: (f.sort_key, f.name))


def find_auxiliary_files(
    directory: Path,
    exclude: Iterable[str] = (),
    rule: MatchRule = MatchRule.EITHER,
    marker: str = "test_result",
) -> list[SourceFile]:
    """Auxiliary files for the join pipeline, ordered by their start number."""
    found: list[SourceFile] = []
    skipped: list[Path] = []
    for path in list_markdown_files(directory, exclude):
        if matches_rule(path.name, rule, marker):
            found.append(SourceFile(path, extract_sort_key(path.name)))
        else:
            skipped.append(path)
    _log_skipped(skipped, f"not matching rule '{rule.value}'")
    return sorted(found, key=lambda f: (f.sort_key or 0, f.name))
