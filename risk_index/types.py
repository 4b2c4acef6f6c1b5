"""
Risk Index Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the Risk Index Engine.

A risk formula is a declarative document made of:
- Identifying metadata (model name, author, version)
- An ordered list of weighted scoring components
- An optional ordered list of post-calculation modifiers

This module defines the typed form of that document plus
the result types the engine produces.

============================================================
DESIGN PRINCIPLES
============================================================
- Formulas are immutable once parsed (frozen dataclasses, tuples)
- Component kinds are a closed set of variants
- Unknown component types are a variant of their own, never an error
- Results carry absorbed faults explicitly

============================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union


# ============================================================
# ALIASES
# ============================================================

# One row of raw cell values, in spreadsheet column order.
Record = Sequence[Any]

# Logical column name -> zero-based position in a Record.
ColumnIndexMap = Mapping[str, int]

ConditionValue = Union[str, float, bool, None]


# ============================================================
# ENUMS
# ============================================================


class ComponentType(str, Enum):
    """
    Calculation variants a component can declare.

    UNKNOWN covers an absent type as well as any type string
    this engine does not implement.
    """

    VALUE_MAP = "value-map"
    LINEAR = "linear"
    LINEAR_MULTIPLIER = "linear-multiplier"
    INVERSE_LINEAR = "inverse-linear"
    INVERSE_RATIO = "inverse-ratio"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, raw: Any) -> "ComponentType":
        """Map a raw ``type`` field onto a known variant, else UNKNOWN."""
        if isinstance(raw, str):
            for member in cls:
                if member is not cls.UNKNOWN and member.value == raw:
                    return member
        return cls.UNKNOWN


class ModifierOperator(str, Enum):
    """Arithmetic operators a modifier operation may use."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


# ============================================================
# COMPONENT VARIANTS
# ============================================================


@dataclass(frozen=True)
class ComponentSpec:
    """
    Base for one weighted scoring rule.

    ``weight`` caps the linear family. For value maps it is
    informational only.
    """

    name: str
    display_name: Optional[str] = None
    weight: float = 0.0
    calculation: str = ""
    raw_type: Optional[str] = None

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.UNKNOWN

    @property
    def label(self) -> str:
        """Name shown to users."""
        return self.display_name or self.name

    @property
    def columns(self) -> Tuple[str, ...]:
        """Source columns this component reads."""
        return ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "displayName": self.display_name,
            "weight": self.weight,
            "type": self.raw_type,
            "calculation": self.calculation,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class ValueMapComponent(ComponentSpec):
    """Looks the cell up in a literal value -> points map."""

    column: Optional[str] = None
    mapping: Mapping[str, Any] = field(default_factory=dict)

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.VALUE_MAP

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.column,) if self.column else ()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["column"] = self.column
        data["map"] = dict(self.mapping)
        return data


@dataclass(frozen=True)
class LinearComponent(ComponentSpec):
    """Cell value as points, capped at weight."""

    column: Optional[str] = None

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.LINEAR

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.column,) if self.column else ()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["column"] = self.column
        return data


@dataclass(frozen=True)
class LinearMultiplierComponent(ComponentSpec):
    """Cell value times multiplier, capped at weight."""

    column: Optional[str] = None
    multiplier: float = 1.0

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.LINEAR_MULTIPLIER

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.column,) if self.column else ()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["column"] = self.column
        data["multiplier"] = self.multiplier
        return data


@dataclass(frozen=True)
class InverseLinearComponent(ComponentSpec):
    """Percentage cell (0-100) scored inversely against weight."""

    column: Optional[str] = None

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.INVERSE_LINEAR

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.column,) if self.column else ()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["column"] = self.column
        return data


@dataclass(frozen=True)
class InverseRatioComponent(ComponentSpec):
    """Scores ``1 - denominator/numerator`` against weight."""

    numerator_column: Optional[str] = None
    denominator_column: Optional[str] = None

    @property
    def component_type(self) -> ComponentType:
        return ComponentType.INVERSE_RATIO

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(c for c in (self.numerator_column, self.denominator_column) if c)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["columns"] = {
            "numerator": self.numerator_column,
            "denominator": self.denominator_column,
        }
        return data


@dataclass(frozen=True)
class UnknownComponent(ComponentSpec):
    """A component whose type is absent or not implemented. Scores 0."""


# ============================================================
# MODIFIERS
# ============================================================


@dataclass(frozen=True)
class ModifierOperation:
    operator: ModifierOperator
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"operator": self.operator.value, "value": self.value}


@dataclass(frozen=True)
class ModifierSpec:
    """
    Conditional post-score adjustment.

    When the record's ``condition_column`` matches
    ``condition_value``, ``operations`` are folded over the
    running total in declared order.
    """

    name: str
    display_name: Optional[str] = None
    condition_column: Optional[str] = None
    condition_value: ConditionValue = None
    calculation: str = ""
    operations: Tuple[ModifierOperation, ...] = ()

    @property
    def label(self) -> str:
        return self.display_name or self.name

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "displayName": self.display_name,
            "conditionColumn": self.condition_column,
            "conditionValue": self.condition_value,
            "calculation": self.calculation,
            "operations": [op.to_dict() for op in self.operations],
        }
        return {k: v for k, v in data.items() if v is not None}


# ============================================================
# FORMULA
# ============================================================


DEFAULT_MAX_SCORE = 100.0


@dataclass(frozen=True)
class FormulaDefinition:
    """
    A validated risk formula.

    Produced by ``schema.validate_formula``. The engine only
    ever reads it.
    """

    model_name: str
    components: Tuple[ComponentSpec, ...]
    post_calculation_modifiers: Tuple[ModifierSpec, ...] = ()
    max_score: Optional[float] = None
    author: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None

    @property
    def effective_max_score(self) -> float:
        """Ceiling for the final clamp."""
        return DEFAULT_MAX_SCORE if self.max_score is None else self.max_score

    @property
    def required_columns(self) -> List[str]:
        """Every column read by components or modifiers, first-seen order."""
        seen: List[str] = []
        for component in self.components:
            for column in component.columns:
                if column not in seen:
                    seen.append(column)
        for modifier in self.post_calculation_modifiers:
            column = modifier.condition_column
            if column and column not in seen:
                seen.append(column)
        return seen

    def to_dict(self) -> Dict[str, Any]:
        """Re-emit the document in its authored (camelCase) shape."""
        data: Dict[str, Any] = {"modelName": self.model_name}
        for key, value in (
            ("author", self.author),
            ("description", self.description),
            ("version", self.version),
            ("maxScore", self.max_score),
        ):
            if value is not None:
                data[key] = value
        data["components"] = [c.to_dict() for c in self.components]
        if self.post_calculation_modifiers:
            data["postCalculationModifiers"] = [
                m.to_dict() for m in self.post_calculation_modifiers
            ]
        return data


# ============================================================
# RESULTS
# ============================================================


@dataclass(frozen=True)
class ScoreBreakdownEntry:
    label: str
    points: int


@dataclass(frozen=True)
class ComponentFault:
    """A component failure that was absorbed as 0 points."""

    component: str
    message: str


@dataclass(frozen=True)
class ScoreResult:
    """
    Output of scoring one record.

    ============================================================
    OUTPUT GUARANTEES
    ============================================================
    - total never exceeds the formula's max score
    - total MAY be negative (modifiers are not floored)
    - breakdown mirrors component order, one entry each
    - every breakdown entry has points >= 0
    ============================================================
    """

    total: int
    breakdown: Tuple[ScoreBreakdownEntry, ...] = ()
    faults: Tuple[ComponentFault, ...] = ()
    model_name: Optional[str] = None

    @property
    def has_faults(self) -> bool:
        return bool(self.faults)

    @property
    def component_total(self) -> int:
        """Sum of component points before modifiers and clamping."""
        return sum(entry.points for entry in self.breakdown)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modelName": self.model_name,
            "total": self.total,
            "breakdown": [
                {"label": e.label, "points": e.points} for e in self.breakdown
            ],
            "faults": [
                {"component": f.component, "message": f.message} for f in self.faults
            ],
        }


# ============================================================
# ERROR TYPES
# ============================================================


class RiskIndexError(Exception):
    """Base exception for risk index errors."""


class SchemaError(RiskIndexError):
    """
    Raised when a formula document fails structural validation.

    ``violations`` lists every problem found, not just the first.
    """

    def __init__(self, violations: Sequence[str], source: Optional[str] = None) -> None:
        self.violations = list(violations)
        self.source = source
        prefix = f"Invalid formula ({source})" if source else "Invalid formula"
        super().__init__(f"{prefix}: " + "; ".join(self.violations))


class ComponentEvaluationError(RiskIndexError):
    """Raised by an evaluator. The engine converts it into a ComponentFault."""

    def __init__(self, message: str, component: Optional[str] = None) -> None:
        super().__init__(message)
        self.component = component


class FormulaNotFoundError(RiskIndexError, KeyError):
    """Raised when a repository has no formula under the requested name."""

    def __init__(self, model_name: str) -> None:
        super().__init__(model_name)
        self.model_name = model_name

    def __str__(self) -> str:
        return f"No formula named '{self.model_name}'"
