"""Canonical data model for Markdown tables and merge configuration.

A Table is the in-memory form of one pipe table: an ordered header row and
an ordered list of data rows.  Rows are plain lists of cell strings whose
first cell is the row identifier used by the identifier-keyed merge.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class Table(BaseModel):
    """One parsed pipe table.

    Rows may hold fewer or more cells than there are headers; nothing here
    pads or truncates them.  Instances are never mutated after construction,
    merges build new tables from copied rows.
    """

    model_config = ConfigDict(frozen=True)

    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def identifiers(self) -> list[str]:
        """First cell of every non-empty row, in row order."""
        return [row[0] for row in self.rows if row]

    def is_compatible(self, other: Table) -> bool:
        """True when both tables have the same header sequence."""
        return list(self.headers) == list(other.headers)


class DocumentSections(BaseModel):
    """A document split at its first horizontal-rule delimiter."""

    before: str = Field(..., description="Region expected to hold the table.")
    after: Optional[str] = Field(default=None, description="Trailing free-form region.")
    source: Optional[str] = Field(default=None, description="File name the text came from.")

    @property
    def has_trailing_content(self) -> bool:
        return self.after is not None and bool(self.after.strip())


class MatchRule(str, Enum):
    SUBSTRING_MARKER = "substring_marker"
    NUMERIC_SUFFIX_ONLY = "numeric_suffix_only"
    EITHER = "either"


class MergeOptions(BaseModel):
    """Policy knobs shared by the join and concat pipelines."""

    model_config = ConfigDict(extra="forbid")

    include_source_annotations: bool = Field(
        default=False, description="Emit <!-- Source: name --> before each trailing region."
    )
    auxiliary_match_rule: MatchRule = Field(default=MatchRule.EITHER)
    marker: str = Field(default="test_result", min_length=1)
    encoding: str = Field(default="utf-8")
    default_output: str = Field(default="output.md")

    @classmethod
    def from_json(cls, config_path: Union[str, Path]) -> MergeOptions:
        """Load options from a JSON file; missing keys keep their defaults."""
        try:
            with open(config_path, "r", encoding="utf-8") as file:
                config = json.load(file)
        except FileNotFoundError:
            logger.error("Configuration file '%s' not found.", config_path)
            raise
        except json.JSONDecodeError as e:
            logger.error("Error decoding JSON configuration file '%s': %s", config_path, e)
            raise
        options = cls.model_validate(config)
        logger.info("Merge options loaded from %s", config_path)
        return options
