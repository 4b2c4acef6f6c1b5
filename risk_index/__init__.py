"""
Risk Index Engine - Package.

============================================================
PURPOSE
============================================================
Evaluates user-authored risk formulas against student
records and produces a bounded risk score with a
per-component breakdown.

============================================================
WHAT IT IS
============================================================
- A small interpreter for declarative JSON scoring formulas
- Deterministic, synchronous, side-effect free per call
- Tolerant of messy sheet data: missing or non-numeric
  cells count as 0, a failing component scores 0

============================================================
WHAT IT IS NOT
============================================================
- NOT a spreadsheet reader or writer
- NOT a UI or formula builder
- NOT a store of formulas between sessions

============================================================
COMPONENT TYPES
============================================================
value-map, linear, linear-multiplier, inverse-linear,
inverse-ratio. Anything else scores 0.

============================================================
USAGE
============================================================
    from risk_index import RiskIndexEngine, FormulaRepository

    repository = FormulaRepository()
    repository.load_bundled()
    formula = repository.get("Re-entry Risk Model")

    engine = RiskIndexEngine()
    result = engine.score(
        formula,
        ["B", 12, 80, "TRUE"],
        {"Letter Grade": 0, "Days Out": 1, "Grade": 2, "Re-entry": 3},
    )

    print(f"Risk Score: {result.total}")

============================================================
"""

# Types
from .types import (
    # Enums
    ComponentType,
    ModifierOperator,

    # Formula model
    ComponentSpec,
    ValueMapComponent,
    LinearComponent,
    LinearMultiplierComponent,
    InverseLinearComponent,
    InverseRatioComponent,
    UnknownComponent,
    ModifierOperation,
    ModifierSpec,
    FormulaDefinition,

    # Output types
    ScoreBreakdownEntry,
    ComponentFault,
    ScoreResult,

    # Exceptions
    RiskIndexError,
    SchemaError,
    ComponentEvaluationError,
    FormulaNotFoundError,
)

# Schema
from .schema import (
    validate_formula,
    parse_formula_json,
    load_formula_file,
)

# Configuration
from .config import (
    RiskIndexConfig,
    get_default_config,
    load_config,
)

# Evaluation
from .components import (
    BaseComponentEvaluator,
    ComponentOutcome,
    evaluate_component,
)
from .modifiers import (
    apply_modifiers,
    apply_operation,
    condition_matches,
)

# Engine
from .engine import (
    RiskIndexEngine,
    CompatibilityReport,
    calculate_risk_score,
    format_score_summary,
    format_formula_details,
)

# Supporting
from .repository import FormulaRepository
from .columns import (
    DEFAULT_COLUMN_ALIASES,
    find_column_index,
    build_column_index_map,
)


__all__ = [
    # Enums
    "ComponentType",
    "ModifierOperator",

    # Formula model
    "ComponentSpec",
    "ValueMapComponent",
    "LinearComponent",
    "LinearMultiplierComponent",
    "InverseLinearComponent",
    "InverseRatioComponent",
    "UnknownComponent",
    "ModifierOperation",
    "ModifierSpec",
    "FormulaDefinition",

    # Output types
    "ScoreBreakdownEntry",
    "ComponentFault",
    "ScoreResult",

    # Exceptions
    "RiskIndexError",
    "SchemaError",
    "ComponentEvaluationError",
    "FormulaNotFoundError",

    # Schema
    "validate_formula",
    "parse_formula_json",
    "load_formula_file",

    # Configuration
    "RiskIndexConfig",
    "get_default_config",
    "load_config",

    # Evaluation
    "BaseComponentEvaluator",
    "ComponentOutcome",
    "evaluate_component",
    "apply_modifiers",
    "apply_operation",
    "condition_matches",

    # Engine
    "RiskIndexEngine",
    "CompatibilityReport",
    "calculate_risk_score",
    "format_score_summary",
    "format_formula_details",

    # Supporting
    "FormulaRepository",
    "DEFAULT_COLUMN_ALIASES",
    "find_column_index",
    "build_column_index_map",
]


__version__ = "1.0.0"
