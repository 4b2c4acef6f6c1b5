"""
Risk Index Engine - Formula Schema.

============================================================
PURPOSE
============================================================
Turns a raw, user-authored formula document (parsed JSON)
into a typed FormulaDefinition.

============================================================
VALIDATION CONTRACT
============================================================
Rejected (SchemaError, every violation listed):
- modelName absent or not a string
- components absent, not an array, or empty
- maxScore present but not a non-negative number

Accepted permissively:
- weight absent -> 0
- type absent or unrecognised -> UnknownComponent (scores 0)
- variant fields missing -> component still parses
- postCalculationModifiers absent -> empty
- declared version is never checked

One malformed component never blocks the rest of the
formula.

============================================================
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from .coercion import parse_number
from .types import (
    ComponentSpec,
    ComponentType,
    FormulaDefinition,
    InverseLinearComponent,
    InverseRatioComponent,
    LinearComponent,
    LinearMultiplierComponent,
    ModifierOperation,
    ModifierOperator,
    ModifierSpec,
    SchemaError,
    UnknownComponent,
    ValueMapComponent,
)


logger = logging.getLogger(__name__)


# ============================================================
# RAW DOCUMENT SHAPE
# ============================================================


class FormulaDocument(BaseModel):
    """
    Root shape of a formula document.

    Only the fields that gate acceptance are typed strictly.
    Components and modifiers stay loose here and are parsed
    one by one afterwards.
    """

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    model_name: StrictStr = Field(alias="modelName")
    components: List[Any] = Field(alias="components", min_length=1)
    post_calculation_modifiers: Optional[List[Any]] = Field(
        default=None, alias="postCalculationModifiers"
    )
    max_score: Optional[float] = Field(default=None, alias="maxScore", ge=0, strict=True)
    author: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None

    @field_validator("author", "description", "version", mode="before")
    @classmethod
    def _stringify_info(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        return str(value)


def _format_error(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "document"
    return f"{location}: {error.get('msg', 'invalid value')}"


# ============================================================
# COMPONENT PARSING
# ============================================================


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _parse_component(raw: Any, position: int) -> ComponentSpec:
    """Build the component variant for one raw entry. Never raises."""
    if not isinstance(raw, dict):
        logger.warning(f"Component #{position} is not an object; it will score 0")
        return UnknownComponent(name=f"component-{position}")

    name = _optional_str(raw.get("name")) or f"component-{position}"
    raw_type = raw.get("type")
    base = dict(
        name=name,
        display_name=_optional_str(raw.get("displayName")),
        weight=parse_number(raw.get("weight")),
        calculation=_optional_str(raw.get("calculation")) or "",
        raw_type=_optional_str(raw_type),
    )
    column = _optional_str(raw.get("column"))
    component_type = ComponentType.from_raw(raw_type)

    if component_type is ComponentType.VALUE_MAP:
        mapping = raw.get("map")
        if not isinstance(mapping, dict):
            logger.warning(f"Component '{name}' has no usable map; lookups will miss")
            mapping = {}
        return ValueMapComponent(column=column, mapping=MappingProxyType(dict(mapping)), **base)

    if component_type is ComponentType.LINEAR:
        return LinearComponent(column=column, **base)

    if component_type is ComponentType.LINEAR_MULTIPLIER:
        multiplier = raw.get("multiplier")
        return LinearMultiplierComponent(
            column=column,
            multiplier=1.0 if multiplier is None else parse_number(multiplier),
            **base,
        )

    if component_type is ComponentType.INVERSE_LINEAR:
        return InverseLinearComponent(column=column, **base)

    if component_type is ComponentType.INVERSE_RATIO:
        columns = raw.get("columns")
        if not isinstance(columns, dict):
            columns = {}
        return InverseRatioComponent(
            numerator_column=_optional_str(columns.get("numerator")),
            denominator_column=_optional_str(columns.get("denominator")),
            **base,
        )

    if raw_type is not None:
        logger.info(f"Component '{name}' has unsupported type '{raw_type}'; it will score 0")
    return UnknownComponent(**base)


# ============================================================
# MODIFIER PARSING
# ============================================================


def _parse_condition_value(value: Any) -> Union[str, float, bool, None]:
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    return str(value)


def _parse_operations(raw_operations: Any, modifier_name: str) -> Tuple[ModifierOperation, ...]:
    if not isinstance(raw_operations, list):
        return ()

    operations: List[ModifierOperation] = []
    for raw in raw_operations:
        if not isinstance(raw, dict):
            logger.warning(f"Modifier '{modifier_name}': skipping non-object operation")
            continue
        try:
            operator = ModifierOperator(raw.get("operator"))
        except ValueError:
            logger.warning(
                f"Modifier '{modifier_name}': skipping unknown operator {raw.get('operator')!r}"
            )
            continue
        operations.append(ModifierOperation(operator=operator, value=parse_number(raw.get("value"))))
    return tuple(operations)


def _parse_modifier(raw: Any, position: int) -> Optional[ModifierSpec]:
    if not isinstance(raw, dict):
        logger.warning(f"Modifier #{position} is not an object; skipping")
        return None

    name = _optional_str(raw.get("name")) or f"modifier-{position}"
    return ModifierSpec(
        name=name,
        display_name=_optional_str(raw.get("displayName")),
        condition_column=_optional_str(raw.get("conditionColumn")),
        condition_value=_parse_condition_value(raw.get("conditionValue")),
        calculation=_optional_str(raw.get("calculation")) or "",
        operations=_parse_operations(raw.get("operations"), name),
    )


# ============================================================
# PUBLIC API
# ============================================================


def validate_formula(raw_document: Any, source: Optional[str] = None) -> FormulaDefinition:
    """
    Validate a raw formula document.

    Args:
        raw_document: Parsed JSON object
        source: Optional file name or label used in error messages

    Returns:
        FormulaDefinition

    Raises:
        SchemaError: If the document is structurally invalid
    """
    if not isinstance(raw_document, dict):
        raise SchemaError(["document: must be a JSON object"], source=source)

    try:
        document = FormulaDocument.model_validate(raw_document)
    except ValidationError as e:
        raise SchemaError([_format_error(err) for err in e.errors()], source=source) from e

    components = tuple(
        _parse_component(raw, position) for position, raw in enumerate(document.components)
    )
    modifiers = tuple(
        modifier
        for modifier in (
            _parse_modifier(raw, position)
            for position, raw in enumerate(document.post_calculation_modifiers or [])
        )
        if modifier is not None
    )

    formula = FormulaDefinition(
        model_name=document.model_name,
        components=components,
        post_calculation_modifiers=modifiers,
        max_score=document.max_score,
        author=document.author,
        description=document.description,
        version=document.version,
    )
    logger.debug(
        f"Validated formula '{formula.model_name}': "
        f"{len(components)} components, {len(modifiers)} modifiers"
    )
    return formula


def parse_formula_json(text: str, source: Optional[str] = None) -> FormulaDefinition:
    """Parse and validate a formula from JSON text."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError([f"document: not valid JSON ({e.msg} at line {e.lineno})"], source=source) from e
    return validate_formula(raw, source=source)


def load_formula_file(path: Union[str, Path]) -> FormulaDefinition:
    """Read, parse and validate a formula JSON file."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    return parse_formula_json(text, source=path.name)
