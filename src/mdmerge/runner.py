"""Command-line runner for mdmerge.

Usage:
    mdmerge join <input.md> [output.md] [--dir <dir>] [--match-rule <rule>]
    mdmerge concat [output.md] [--dir <dir>]

Common options: --config <options.json>, --annotate, -v/--verbose.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .pipeline import MergeResult, concat_files, join_files
from .schema import MatchRule, MergeOptions

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

def build_options(args: argparse.Namespace) -> MergeOptions:
    """Defaults, then the --config file, then command-line flags."""
    options = MergeOptions.from_json(args.config) if args.config else MergeOptions()
    updates: dict = {}
    if args.annotate:
        updates["include_source_annotations"] = True
    if getattr(args, "match_rule", None):
        updates["auxiliary_match_rule"] = MatchRule(args.match_rule)
    return options.model_copy(update=updates) if updates else options


def _report(result: MergeResult) -> None:
    print(f"Successfully merged markdown tables into {result.output_path}")
    print(f"  files used:    {len(result.sources)}")
    print(f"  rows written:  {result.n_rows}")
    if result.skipped:
        print(f"  files skipped: {', '.join(result.skipped)}")
    if result.rejected:
        print(f"  files rejected: {', '.join(result.rejected)}")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def cmd_join(args: argparse.Namespace) -> None:
    """Left-join auxiliary files onto the input file's table."""
    options = build_options(args)
    directory = Path(args.dir) if args.dir else None
    result = join_files(args.input, args.output, directory=directory, options=options)
    _report(result)


def cmd_concat(args: argparse.Namespace) -> None:
    """Accumulate the tables of all numbered chunk files."""
    options = build_options(args)
    directory = Path(args.dir) if args.dir else Path(".")
    result = concat_files(args.output, directory=directory, options=options)
    _report(result)


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--dir", help="Directory to scan for Markdown files")
    p.add_argument("--config", help="JSON file with merge options")
    p.add_argument("--annotate", action="store_true", help="Add <!-- Source: file --> comments to the output")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mdmerge", description="Merge Markdown tables across files")
    sub = parser.add_subparsers(dest="command")

    p_join = sub.add_parser("join", help="Join auxiliary tables onto a base table by ID")
    p_join.add_argument("input", help="Markdown file holding the base table")
    p_join.add_argument("output", nargs="?", help="Output file (default: output.md in the scan directory)")
    p_join.add_argument(
        "--match-rule",
        choices=[r.value for r in MatchRule],
        help="Which file names count as auxiliary files",
    )
    _add_common(p_join)

    p_concat = sub.add_parser("concat", help="Concatenate tables of numbered chunk files")
    p_concat.add_argument("output", nargs="?", help="Output file (default: output.md in the scan directory)")
    _add_common(p_concat)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        if args.command == "join":
            cmd_join(args)
        elif args.command == "concat":
            cmd_concat(args)
    except (OSError, ValueError) as e:
        logger.debug("Merge failed", exc_info=True)
        print(f"Error merging markdown tables: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
