"""Combine several tables into one.

Two distinct modes:

``merge_by_identifier``
    Left join of auxiliary tables onto a base table, keyed by the first
    column.  The base table decides which rows exist and in what order;
    auxiliary tables only contribute extra columns.  When several auxiliary
    rows share an identifier, the one from the later table wins, so the
    order of ``auxiliaries`` matters.

``accumulate``
    Row-wise concatenation of tables that share one header schema.  Tables
    whose headers differ from the first table's are left out with a warning.

Auxiliary header schemas are assumed uniform beyond the identifier column.
This is not checked: mismatched auxiliary tables produce misaligned columns.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .schema import Table

logger = logging.getLogger(__name__)


def _identifier_index(auxiliaries: Sequence[Table]) -> dict[str, list[str]]:
    index: dict[str, list[str]] = {}
    for table in auxiliaries:
        for row in table.rows:
            if row:
                index[row[0]] = row
    return index


def _auxiliary_headers(auxiliaries: Sequence[Table]) -> list[str]:
    for table in auxiliaries:
        if table.headers:
            return list(table.headers)
    return []


def merge_by_identifier(base: Optional[Table], auxiliaries: Sequence[Table]) -> Table:
    """Left-join `auxiliaries` onto `base` by the first column.

    Merged headers are the base headers followed by the first auxiliary
    header row minus its identifier column.  A base row with a match gets
    the matched row's cells after the identifier; a row without one gets
    empty strings so every row keeps its alignment.

    Raises:
        ValueError: If `base` is None.
    """
    if base is None:
        raise ValueError("merge_by_identifier() requires a base table")

    if not auxiliaries:
        return Table(headers=list(base.headers), rows=[list(row) for row in base.rows])

    index = _identifier_index(auxiliaries)
    aux_headers = _auxiliary_headers(auxiliaries)
    extra_width = max(len(aux_headers) - 1, 0)

    merged_rows: list[list[str]] = []
    n_matched = 0
    for row in base.rows:
        merged = list(row)
        match = index.get(row[0]) if row else None
        if match is not None:
            merged.extend(match[1:])
            n_matched += 1
        else:
            merged.extend([""] * extra_width)
        merged_rows.append(merged)

    logger.debug(
        "Merged %d auxiliary table(s): %d of %d base rows matched",
        len(auxiliaries), n_matched, len(base.rows),
    )
    return Table(headers=list(base.headers) + aux_headers[1:], rows=merged_rows)


def accumulate(tables: Sequence[Table]) -> Table:
    """Concatenate the rows of tables that share the first table's headers."""
    if not tables:
        logger.warning("No tables to accumulate")
        return Table()

    reference = tables[0]
    rows: list[list[str]] = []
    for position, table in enumerate(tables):
        if not reference.is_compatible(table):
            logger.warning(
                "Table %d has headers %s, expected %s; skipping its %d row(s)",
                position + 1, table.headers, reference.headers, len(table.rows),
            )
            continue
        rows.extend(list(row) for row in table.rows)

    return Table(headers=list(reference.headers), rows=rows)
