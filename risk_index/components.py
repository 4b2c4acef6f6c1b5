"""
Risk Index Engine - Component Evaluators.

============================================================
PURPOSE
============================================================
One evaluator per component variant.

Each evaluator:
1. Reads its source cell(s) through the column index map
2. Applies the variant formula
3. Returns the raw (unclamped) result

``evaluate_component`` then clamps the raw result to
``max(0, round_half_up(result))`` and absorbs any failure
into a ComponentFault worth 0 points.

============================================================
VARIANT FORMULAS
============================================================
value-map          map[str(value)], 0 if absent
linear             min(value, weight)
linear-multiplier  min(value * multiplier, weight)
inverse-linear     (1 - value/100) * weight
inverse-ratio      (1 - den/num) * weight if num > 0 else 0
unknown            0

============================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from .coercion import parse_number, read_cell, round_half_up, stringify
from .types import (
    ColumnIndexMap,
    ComponentEvaluationError,
    ComponentFault,
    ComponentSpec,
    ComponentType,
    InverseLinearComponent,
    InverseRatioComponent,
    LinearComponent,
    LinearMultiplierComponent,
    Record,
    ValueMapComponent,
)


logger = logging.getLogger(__name__)


# ============================================================
# BASE EVALUATOR
# ============================================================


class BaseComponentEvaluator(ABC):
    """Abstract base for component evaluators."""

    @property
    @abstractmethod
    def component_type(self) -> ComponentType:
        """Return the variant this evaluator handles."""
        pass

    @abstractmethod
    def evaluate(
        self,
        component: ComponentSpec,
        record: Record,
        column_index_map: ColumnIndexMap,
    ) -> float:
        """Return the raw score before clamping."""
        pass


# ============================================================
# VARIANT EVALUATORS
# ============================================================


class ValueMapEvaluator(BaseComponentEvaluator):
    """Exact, case-sensitive lookup of the cell text in the map."""

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.VALUE_MAP

    def evaluate(self, component: ValueMapComponent, record, column_index_map) -> float:
        key = stringify(read_cell(record, column_index_map, component.column))
        if key not in component.mapping:
            return 0.0

        points = component.mapping[key]
        if isinstance(points, bool) or not isinstance(points, (int, float)):
            raise ComponentEvaluationError(
                f"map value for {key!r} is not a number: {points!r}",
                component=component.name,
            )
        return float(points)


class LinearEvaluator(BaseComponentEvaluator):

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.LINEAR

    def evaluate(self, component: LinearComponent, record, column_index_map) -> float:
        value = parse_number(read_cell(record, column_index_map, component.column))
        return min(value, component.weight)


class LinearMultiplierEvaluator(BaseComponentEvaluator):

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.LINEAR_MULTIPLIER

    def evaluate(self, component: LinearMultiplierComponent, record, column_index_map) -> float:
        value = parse_number(read_cell(record, column_index_map, component.column))
        return min(value * component.multiplier, component.weight)


class InverseLinearEvaluator(BaseComponentEvaluator):
    """
    Treats the cell as a 0-100 percentage: 100% scores 0,
    0% scores the full weight. Out-of-range values extrapolate
    and are left for the clamp.
    """

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.INVERSE_LINEAR

    def evaluate(self, component: InverseLinearComponent, record, column_index_map) -> float:
        value = parse_number(read_cell(record, column_index_map, component.column))
        return (1 - value / 100) * component.weight


class InverseRatioEvaluator(BaseComponentEvaluator):

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.INVERSE_RATIO

    def evaluate(self, component: InverseRatioComponent, record, column_index_map) -> float:
        numerator = parse_number(read_cell(record, column_index_map, component.numerator_column))
        denominator = parse_number(read_cell(record, column_index_map, component.denominator_column))
        if numerator <= 0:
            return 0.0
        return (1 - denominator / numerator) * component.weight


_EVALUATORS: Dict[ComponentType, BaseComponentEvaluator] = {
    evaluator.component_type: evaluator
    for evaluator in (
        ValueMapEvaluator(),
        LinearEvaluator(),
        LinearMultiplierEvaluator(),
        InverseLinearEvaluator(),
        InverseRatioEvaluator(),
    )
}


def get_evaluator(component_type: ComponentType) -> Optional[BaseComponentEvaluator]:
    """Evaluator for a variant, or None for UNKNOWN."""
    return _EVALUATORS.get(component_type)


# ============================================================
# EVALUATION ENTRY POINT
# ============================================================


@dataclass(frozen=True)
class ComponentOutcome:
    """Clamped points for one component, plus the fault if it failed."""

    points: int
    fault: Optional[ComponentFault] = None

    @property
    def ok(self) -> bool:
        return self.fault is None


def clamp_points(raw: float) -> int:
    return max(0, round_half_up(raw))


def evaluate_component(
    component: ComponentSpec,
    record: Record,
    column_index_map: ColumnIndexMap,
    log_faults: bool = True,
) -> ComponentOutcome:
    """
    Score one component against one record.

    Args:
        component: The component to evaluate
        record: Row of raw cell values
        column_index_map: Logical column name -> row position
        log_faults: Log absorbed failures at WARNING

    Returns:
        ComponentOutcome. Never raises for evaluation failures.
    """
    evaluator = get_evaluator(component.component_type)
    if evaluator is None:
        return ComponentOutcome(points=0)

    try:
        raw = evaluator.evaluate(component, record, column_index_map)
        return ComponentOutcome(points=clamp_points(raw))
    except Exception as e:
        if log_faults:
            logger.warning(f"Component '{component.name}' failed, scoring 0: {e}")
        return ComponentOutcome(
            points=0,
            fault=ComponentFault(component=component.name, message=str(e)),
        )
