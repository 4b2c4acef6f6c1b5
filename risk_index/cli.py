"""
Risk Index Engine - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line access to the formula repository and engine.

- list:      model names available
- describe:  plain-text details of one formula
- validate:  check a formula file, print every violation
- score:     score each row of a CSV file

============================================================
USAGE
============================================================
python -m risk_index list
python -m risk_index describe "Standard Risk Model"
python -m risk_index validate my-formula.json
python -m risk_index score --formula "Re-entry Risk Model" --input students.csv --output scored.csv

============================================================
"""

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .columns import build_column_index_map
from .config import load_config
from .engine import RiskIndexEngine, format_formula_details
from .logging_utils import setup_logging
from .repository import FormulaRepository
from .schema import load_formula_file
from .types import FormulaDefinition, FormulaNotFoundError, SchemaError


logger = logging.getLogger(__name__)

SCORE_COLUMN = "Risk Score"


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="risk-index",
        description="Evaluate student risk formulas against tabular records",
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="YAML configuration file",
    )
    parser.add_argument(
        "--formulas-dir",
        type=str,
        metavar="DIR",
        help="Directory of formula JSON files (in addition to the bundled ones)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version="%(prog)s 1.0.0",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List available formulas")

    describe = subparsers.add_parser("describe", help="Show a formula's details")
    describe.add_argument("formula", help="Model name or path to a formula file")

    validate = subparsers.add_parser("validate", help="Validate a formula file")
    validate.add_argument("path", help="Formula JSON file")

    score = subparsers.add_parser("score", help="Score every row of a CSV file")
    score.add_argument("--formula", "-f", required=True, help="Model name or formula file")
    score.add_argument("--input", "-i", required=True, metavar="CSV", help="CSV with a header row")
    score.add_argument("--output", "-o", metavar="CSV", help="Write scored rows here (default: stdout)")

    return parser


# ============================================================
# HELPERS
# ============================================================

def build_repository(formulas_dir: Optional[str]) -> FormulaRepository:
    repository = FormulaRepository()
    repository.load_bundled()
    if formulas_dir:
        repository.load_directory(formulas_dir, replace=True)
    return repository


def resolve_formula(reference: str, repository: FormulaRepository) -> FormulaDefinition:
    """A path to an existing file wins over a model name."""
    path = Path(reference)
    if path.is_file():
        return load_formula_file(path)
    return repository.get(reference)


# ============================================================
# COMMANDS
# ============================================================

def cmd_list(repository: FormulaRepository) -> int:
    for name in repository.names():
        print(name)
    return 0


def cmd_describe(reference: str, repository: FormulaRepository) -> int:
    print(format_formula_details(resolve_formula(reference, repository)))
    return 0


def cmd_validate(path: str) -> int:
    try:
        formula = load_formula_file(path)
    except SchemaError as e:
        print(f"INVALID: {path}")
        for violation in e.violations:
            print(f"  - {violation}")
        return 1

    print(f"OK: {formula.model_name} ({len(formula.components)} components, "
          f"{len(formula.post_calculation_modifiers)} modifiers)")
    return 0


def cmd_score(
    reference: str,
    input_path: str,
    output_path: Optional[str],
    repository: FormulaRepository,
    engine: RiskIndexEngine,
) -> int:
    formula = resolve_formula(reference, repository)

    with open(input_path, "r", encoding="utf-8-sig", newline="") as f:
        rows = list(csv.reader(f))
    if not rows:
        print(f"No header row in {input_path}", file=sys.stderr)
        return 1

    headers, records = rows[0], rows[1:]
    column_index_map = build_column_index_map(headers, formula.required_columns)

    report = engine.check_compatibility(formula, column_index_map)
    for column in report.missing_columns:
        print(f"Warning: column '{column}' not found; it will score 0", file=sys.stderr)

    results = engine.score_batch(formula, records, column_index_map)

    out = open(output_path, "w", encoding="utf-8", newline="") if output_path else sys.stdout
    try:
        writer = csv.writer(out)
        writer.writerow(list(headers) + [SCORE_COLUMN])
        for record, result in zip(records, results):
            writer.writerow(list(record) + [result.total])
    finally:
        if output_path:
            out.close()

    logger.info(f"Scored {len(records)} rows with '{formula.model_name}'")
    return 0


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    config = load_config(args.config)
    formulas_dir = args.formulas_dir or config.formulas_dir

    try:
        if args.command == "validate":
            return cmd_validate(args.path)

        repository = build_repository(formulas_dir)
        if args.command == "list":
            return cmd_list(repository)
        if args.command == "describe":
            return cmd_describe(args.formula, repository)
        if args.command == "score":
            return cmd_score(args.formula, args.input, args.output, repository, RiskIndexEngine(config))
    except (FormulaNotFoundError, SchemaError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 2


if __name__ == "__main__":
    sys.exit(main())
