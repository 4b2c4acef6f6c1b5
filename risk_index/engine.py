"""
Risk Index Engine - Main Orchestrator.

============================================================
PURPOSE
============================================================
The RiskIndexEngine is the main entry point for scoring.

For one record it:
1. Evaluates every component in order (faults absorbed as 0)
2. Sums the clamped component points
3. Folds the post-calculation modifiers over the sum
4. Clamps the result to the formula's max score

============================================================
DESIGN PRINCIPLES
============================================================
- Pure and synchronous per call
- Never mutates the formula
- No state shared between calls; safe to run in parallel
- Only schema failures propagate to the caller

============================================================
USAGE
============================================================
    from risk_index import RiskIndexEngine, validate_formula

    formula = validate_formula(document)
    engine = RiskIndexEngine()

    result = engine.score(formula, row, {"Grade": 0, "Days Out": 1})

    print(f"Total: {result.total}")
    for entry in result.breakdown:
        print(f"  {entry.label}: {entry.points}")

============================================================
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .coercion import round_half_up
from .components import evaluate_component
from .config import RiskIndexConfig
from .modifiers import apply_modifiers
from .schema import validate_formula
from .types import (
    ColumnIndexMap,
    ComponentFault,
    FormulaDefinition,
    Record,
    ScoreBreakdownEntry,
    ScoreResult,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompatibilityReport:
    """Whether a sheet's resolved columns can feed a formula."""

    model_name: str
    missing_columns: Tuple[str, ...]
    sample_results: Tuple[ScoreResult, ...] = ()

    @property
    def is_compatible(self) -> bool:
        return not self.missing_columns

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modelName": self.model_name,
            "compatible": self.is_compatible,
            "missingColumns": list(self.missing_columns),
            "sampleResults": [r.to_dict() for r in self.sample_results],
        }


class RiskIndexEngine:
    """
    Evaluates risk formulas against records.

    The engine holds configuration only. Formulas are passed in
    per call, so one engine can serve any number of formulas.
    """

    def __init__(self, config: Optional[RiskIndexConfig] = None):
        """
        Args:
            config: Engine configuration. Uses defaults if not provided.
        """
        self.config = config or RiskIndexConfig()

    def score(
        self,
        formula: FormulaDefinition,
        record: Record,
        column_index_map: ColumnIndexMap,
    ) -> ScoreResult:
        """
        Score one record.

        Args:
            formula: Validated formula
            record: Row of raw cell values
            column_index_map: Logical column name -> row position

        Returns:
            ScoreResult with total, breakdown and absorbed faults
        """
        # --------------------------------------------------
        # Step 1: Components
        # --------------------------------------------------
        component_total = 0
        breakdown: List[ScoreBreakdownEntry] = []
        faults: List[ComponentFault] = []

        for component in formula.components:
            outcome = evaluate_component(
                component,
                record,
                column_index_map,
                log_faults=self.config.log_component_faults,
            )
            component_total += outcome.points
            breakdown.append(ScoreBreakdownEntry(label=component.label, points=outcome.points))
            if outcome.fault is not None:
                faults.append(outcome.fault)

        # --------------------------------------------------
        # Step 2: Modifiers
        # --------------------------------------------------
        running_total = apply_modifiers(
            component_total,
            formula.post_calculation_modifiers,
            record,
            column_index_map,
        )

        # --------------------------------------------------
        # Step 3: Final clamp (ceiling only)
        # --------------------------------------------------
        total = self._clamp_total(running_total, formula)

        return ScoreResult(
            total=total,
            breakdown=tuple(breakdown),
            faults=tuple(faults),
            model_name=formula.model_name,
        )

    def score_document(
        self,
        raw_document: Any,
        record: Record,
        column_index_map: ColumnIndexMap,
    ) -> ScoreResult:
        """
        Validate a raw formula document, then score one record.

        Raises:
            SchemaError: If the document is structurally invalid
        """
        return self.score(validate_formula(raw_document), record, column_index_map)

    def score_batch(
        self,
        formula: FormulaDefinition,
        records: Sequence[Record],
        column_index_map: ColumnIndexMap,
        max_workers: Optional[int] = None,
    ) -> List[ScoreResult]:
        """
        Score many records against one formula.

        Records are independent, so they are scored on a thread
        pool; results come back in input order.

        Raises:
            ValueError: If the batch exceeds ``batch_record_limit``
        """
        records = list(records)
        if len(records) > self.config.batch_record_limit:
            raise ValueError(
                f"Batch of {len(records)} records exceeds limit of "
                f"{self.config.batch_record_limit}"
            )
        if not records:
            return []

        workers = max_workers or self.config.batch_max_workers
        if workers <= 1 or len(records) == 1:
            return [self.score(formula, record, column_index_map) for record in records]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(
                executor.map(lambda record: self.score(formula, record, column_index_map), records)
            )

        faulted = sum(1 for r in results if r.has_faults)
        if faulted:
            logger.info(
                f"Scored {len(results)} records with '{formula.model_name}'; "
                f"{faulted} had component faults"
            )
        return results

    def check_compatibility(
        self,
        formula: FormulaDefinition,
        column_index_map: ColumnIndexMap,
        sample_records: Sequence[Record] = (),
    ) -> CompatibilityReport:
        """
        Check that every column a formula reads is resolved, and
        score a small sample of rows as a dry run.
        """
        missing = tuple(c for c in formula.required_columns if c not in column_index_map)
        sample = list(sample_records)[: self.config.compatibility_sample_size]
        sample_results = tuple(self.score(formula, r, column_index_map) for r in sample)

        if missing:
            logger.info(
                f"Formula '{formula.model_name}' is missing columns: {', '.join(missing)}"
            )
        return CompatibilityReport(
            model_name=formula.model_name,
            missing_columns=missing,
            sample_results=sample_results,
        )

    def _clamp_total(self, running_total: float, formula: FormulaDefinition) -> int:
        ceiling = formula.max_score
        if ceiling is None:
            ceiling = self.config.default_max_score
        return round_half_up(min(running_total, ceiling))


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def calculate_risk_score(
    formula: Union[FormulaDefinition, Dict[str, Any]],
    record: Record,
    column_index_map: ColumnIndexMap,
    config: Optional[RiskIndexConfig] = None,
) -> ScoreResult:
    """
    Score one record in one call.

    Accepts either a validated FormulaDefinition or a raw
    document (validated first).
    """
    engine = RiskIndexEngine(config=config)
    if isinstance(formula, FormulaDefinition):
        return engine.score(formula, record, column_index_map)
    return engine.score_document(formula, record, column_index_map)


def format_score_summary(result: ScoreResult) -> str:
    """Human-readable score with its breakdown."""
    lines = [
        f"Risk Score: {result.total}" + (f" ({result.model_name})" if result.model_name else ""),
    ]
    for entry in result.breakdown:
        lines.append(f"  {entry.label}: {entry.points}")
    for fault in result.faults:
        lines.append(f"  ! {fault.component}: {fault.message}")
    return "\n".join(lines)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def format_formula_details(formula: FormulaDefinition) -> str:
    """
    Plain-text description of a formula: header, components
    with their weights, and modifiers.
    """
    title = formula.model_name
    if formula.version:
        title += f" v{formula.version}"

    lines = [title, "=" * len(title)]
    if formula.author:
        lines.append(f"Author: {formula.author}")
    if formula.description:
        lines.append(formula.description)
    lines.append(f"Maximum Possible Score: {_format_number(formula.effective_max_score)}")

    if formula.components:
        lines.extend(["", "Risk Components"])
        for component in formula.components:
            lines.append(f"  {component.label} ({_format_number(component.weight)} pts)")
            if component.calculation:
                lines.append(f"    {component.calculation}")

    if formula.post_calculation_modifiers:
        lines.extend(["", "Score Modifiers"])
        for modifier in formula.post_calculation_modifiers:
            lines.append(f"  {modifier.label}")
            if modifier.calculation:
                lines.append(f"    {modifier.calculation}")

    return "\n".join(lines)
