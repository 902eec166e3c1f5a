"""
Field entity and the transform/validate value pipeline.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Literal, get_args
from uuid import UUID, uuid4

from headless_cms.domain.results import ValidationResult
from headless_cms.domain.rules import Capability, Rule, TransformationRule, ValidationRule

FieldType = Literal["text", "richtext", "markdown", "numeric", "boolean"]

FIELD_TYPES: tuple[str, ...] = get_args(FieldType)
TEXT_FIELD_TYPES = frozenset({"text", "richtext", "markdown"})

FIELD_CAPABILITIES: dict[str, Capability] = {
    "text": "text",
    "richtext": "text",
    "markdown": "text",
    "numeric": "numeric",
    "boolean": "boolean",
}

REQUIRED_ERROR = "Field is required!"
STRING_SHAPE_ERROR = "Value must be a string."
NUMBER_SHAPE_ERROR = "Value must be a number."
BOOLEAN_SHAPE_ERROR = "Value must be a boolean."

_BOOLEAN_STRINGS = frozenset({"true", "false"})


def supports_capability(field_type: str, capability: Capability) -> bool:
    """True when a rule requiring ``capability`` may be attached to ``field_type``."""
    if capability == "any":
        return True
    return FIELD_CAPABILITIES.get(field_type) == capability


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        try:
            return math.isfinite(float(value.strip()))
        except ValueError:
            return False
    return False


def _is_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip().lower() in _BOOLEAN_STRINGS


def check_value_shape(field_type: str, value: Any) -> str | None:
    """
    Check that a non-null value has an acceptable shape for ``field_type``.

    Returns an error message, or None when the shape is acceptable.
    Raises ValueError for a field type this module does not know.
    """
    if field_type in TEXT_FIELD_TYPES:
        return None if isinstance(value, str) else STRING_SHAPE_ERROR
    if field_type == "numeric":
        return None if _is_number(value) else NUMBER_SHAPE_ERROR
    if field_type == "boolean":
        return None if _is_boolean(value) else BOOLEAN_SHAPE_ERROR
    raise ValueError(f"Unsupported field type '{field_type}'.")


@dataclass(eq=False)
class Field:
    """
    A named, typed slot of a content type.

    Rule lists are assigned once after construction, either by the authoring
    workflow or during persistence hydration.
    """

    name: str
    type: FieldType
    is_required: bool = False
    id: UUID = field(default_factory=uuid4)
    _validation_rules: tuple[ValidationRule, ...] | None = field(default=None, init=False, repr=False)
    _transformation_rules: tuple[TransformationRule, ...] | None = field(
        default=None, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Field name must not be empty.")
        if self.type not in FIELD_TYPES:
            raise ValueError(f"Unsupported field type '{self.type}'.")

    @property
    def validation_rules(self) -> tuple[ValidationRule, ...]:
        return self._validation_rules or ()

    @property
    def transformation_rules(self) -> tuple[TransformationRule, ...]:
        return self._transformation_rules or ()

    def set_validation_rules(self, rules: Iterable[ValidationRule]) -> None:
        if self._validation_rules is not None:
            raise RuntimeError(f"Validation rules of field '{self.name}' are already set.")
        self._validation_rules = tuple(rules)

    def set_transformation_rules(self, rules: Iterable[TransformationRule]) -> None:
        if self._transformation_rules is not None:
            raise RuntimeError(f"Transformation rules of field '{self.name}' are already set.")
        self._transformation_rules = tuple(rules)

    def incompatible_rules(self) -> list[Rule]:
        """Rules whose required capability does not fit this field's type."""
        rules: list[Rule] = [*self.transformation_rules, *self.validation_rules]
        return [r for r in rules if not supports_capability(self.type, r.required_capability)]

    def apply_transformers(self, value: Any) -> Any:
        """Fold the transformation rules over ``value`` left to right."""
        for rule in self.transformation_rules:
            if value is None and not rule.handles_none:
                return None
            value = rule.apply(value)
        return value

    def validate(self, value: Any) -> ValidationResult:
        """Check presence, value shape and every validation rule, collecting all errors."""
        result = ValidationResult(self.name)

        if value is None:
            if self.is_required:
                result.add_error(REQUIRED_ERROR)
            return result

        shape_error = check_value_shape(self.type, value)
        if shape_error is not None:
            result.add_error(shape_error)
            return result

        for rule in self.validation_rules:
            for message in rule.validate(value):
                result.add_error(message)
        return result

    def copy_structure(self) -> Field:
        """Copy definition and rules under a fresh id."""
        clone = Field(name=self.name, type=self.type, is_required=self.is_required)
        clone.set_validation_rules(self.validation_rules)
        clone.set_transformation_rules(self.transformation_rules)
        return clone
