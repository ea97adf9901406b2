"""File-level merge pipelines: discovery → split → extract → merge → write.

``join_files``
    One base document plus auxiliary documents found next to it.  Auxiliary
    tables are left-joined onto the base table by identifier; the trailing
    text of the base and of every auxiliary document follows the table.

``concat_files``
    Every ``<stem>_<N>_<M>.md`` chunk in a directory.  Their tables are
    accumulated row-wise and their trailing text concatenated.

A failure on one auxiliary or chunk file is logged and that file is
skipped.  A missing base file or a base file without a table is fatal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .discovery import find_auxiliary_files, find_numbered_files
from .extract import TableExtractor
from .merge import accumulate, merge_by_identifier
from .render import compose_document
from .schema import DocumentSections, MergeOptions, Table
from .splitter import split_document

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class NoTableFoundError(ValueError):
    """The base document contains no pipe table."""


@dataclass
class MergeResult:
    output_path: Path
    table: Optional[Table]
    sources: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)

    @property
    def n_rows(self) -> int:
        return len(self.table.rows) if self.table is not None else 0


def read_sections(path: Path, encoding: str = "utf-8") -> DocumentSections:
    """Read `path` and split it at its first delimiter."""
    return split_document(path.read_text(encoding=encoding), source=path.name)


def _write(path: Path, text: str, encoding: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding=encoding)
    logger.info("Wrote %s", path)


def join_files(
    input_path: PathLike,
    output_path: Optional[PathLike] = None,
    directory: Optional[PathLike] = None,
    options: Optional[MergeOptions] = None,
    extractor: Optional[TableExtractor] = None,
) -> MergeResult:
    """Left-join auxiliary documents onto the table of `input_path`.

    Auxiliary files are looked up in `directory` (default: the input
    file's directory) according to ``options.auxiliary_match_rule``, and
    merged in ascending filename-sequence order so later chunks win on
    identifier collisions.

    Raises:
        FileNotFoundError: If `input_path` does not exist.
        NoTableFoundError: If the input file holds no table above its
            delimiter.
    """
    options = options or MergeOptions()
    extractor = extractor or TableExtractor()
    input_path = Path(input_path)
    directory = Path(directory) if directory is not None else input_path.parent
    output_path = Path(output_path) if output_path is not None else directory / options.default_output

    if not input_path.is_file():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    base_sections = read_sections(input_path, options.encoding)
    base = extractor.first_table(base_sections.before)
    if base is None:
        raise NoTableFoundError(f"No table found in input file: {input_path.name}")
    logger.info("Base table from %s: %d column(s), %d row(s)", input_path.name, base.column_count, len(base.rows))

    aux_files = find_auxiliary_files(
        directory,
        exclude=[input_path.name, output_path.name],
        rule=options.auxiliary_match_rule,
        marker=options.marker,
    )
    if not aux_files:
        logger.warning("No auxiliary files found to merge in %s", directory)

    result = MergeResult(output_path=output_path, table=None, sources=[input_path.name])
    tables: list[Table] = []
    trailing: list[DocumentSections] = [base_sections]
    for source in aux_files:
        try:
            sections = read_sections(source.path, options.encoding)
            table = extractor.first_table(sections.before)
        except Exception as e:
            logger.error("Error processing file %s: %s", source.name, e)
            result.skipped.append(source.name)
            continue
        if table is not None:
            tables.append(table)
            result.sources.append(source.name)
            logger.info("Loaded table from: %s", source.name)
        else:
            logger.info("No table in %s", source.name)
        trailing.append(sections)

    result.table = merge_by_identifier(base, tables)
    text = compose_document(result.table, trailing, options.include_source_annotations)
    _write(output_path, text, options.encoding)
    return result


def concat_files(
    output_path: Optional[PathLike] = None,
    directory: PathLike = ".",
    options: Optional[MergeOptions] = None,
    extractor: Optional[TableExtractor] = None,
) -> MergeResult:
    """Accumulate the tables of every numbered chunk file in `directory`.

    Every table above each file's delimiter takes part; tables whose headers
    differ from the first one are left out.  Files none of whose tables fit
    are listed in ``rejected`` rather than ``sources``; their trailing text
    is still carried through.

    Raises:
        FileNotFoundError: If no ``_<N>_<M>.md`` file exists in `directory`.
    """
    options = options or MergeOptions()
    extractor = extractor or TableExtractor()
    directory = Path(directory)
    output_path = Path(output_path) if output_path is not None else directory / options.default_output

    files = find_numbered_files(directory, exclude=[output_path.name])
    if not files:
        raise FileNotFoundError(f"No numbered Markdown files found in {directory}")

    result = MergeResult(output_path=output_path, table=None)
    per_file: list[tuple[str, list[Table]]] = []
    trailing: list[DocumentSections] = []
    for source in files:
        try:
            sections = read_sections(source.path, options.encoding)
            found = list(extractor.extract_tables(sections.before))
        except Exception as e:
            logger.error("Error processing file %s: %s", source.name, e)
            result.skipped.append(source.name)
            continue
        logger.info("Loaded %d table(s) from: %s", len(found), source.name)
        if found:
            per_file.append((source.name, found))
        trailing.append(sections)

    tables = [table for _, found in per_file for table in found]
    if tables:
        result.table = accumulate(tables)
        # Files count as used only when at least one table fits the schema.
        for name, found in per_file:
            if any(tables[0].is_compatible(table) for table in found):
                result.sources.append(name)
            else:
                result.rejected.append(name)
    else:
        logger.warning("No tables found in %d file(s)", len(files))

    text = compose_document(result.table, trailing, options.include_source_annotations)
    _write(output_path, text, options.encoding)
    return result
