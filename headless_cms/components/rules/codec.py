"""
Encode and decode rule parameters to and from the stored string form.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from headless_cms.components.rules.models import RuleParameterRecord, ValueType
from headless_cms.domain.rules import InvalidParametersError


def decode_value(value: str, value_type: str) -> Any:
    """Decode one stored parameter value. Raises ValueError on bad input."""
    if value_type == "null":
        return None
    if value_type == "string":
        return value
    if value_type == "integer":
        return int(value)
    if value_type == "number":
        return float(value)
    if value_type == "boolean":
        lowered = value.strip().lower()
        if lowered not in ("true", "false"):
            raise ValueError(f"'{value}' is not a boolean")
        return lowered == "true"
    raise ValueError(f"unknown value type '{value_type}'")


def encode_value(value: Any) -> tuple[str, ValueType]:
    if value is None:
        return "", "null"
    if isinstance(value, bool):
        return ("true" if value else "false"), "boolean"
    if isinstance(value, int):
        return str(value), "integer"
    if isinstance(value, float):
        return repr(value), "number"
    if isinstance(value, str):
        return value, "string"
    raise ValueError(f"cannot store a value of type {type(value).__name__}")


def decode_parameters(rule_type: str, records: Iterable[RuleParameterRecord]) -> dict[str, Any]:
    """Decode stored parameters into the mapping handed to the registry."""
    decoded: dict[str, Any] = {}
    problems: list[str] = []
    for record in records:
        if record.key in decoded:
            problems.append(f"duplicate parameter '{record.key}'")
            continue
        try:
            decoded[record.key] = decode_value(record.value, record.value_type)
        except ValueError as e:
            problems.append(f"parameter '{record.key}': {e}")
    if problems:
        raise InvalidParametersError(rule_type, problems)
    return decoded


def encode_parameters(rule_type: str, parameters: Mapping[str, Any]) -> list[RuleParameterRecord]:
    records: list[RuleParameterRecord] = []
    problems: list[str] = []
    for key, value in parameters.items():
        try:
            text, value_type = encode_value(value)
        except ValueError as e:
            problems.append(f"parameter '{key}': {e}")
            continue
        records.append(RuleParameterRecord(key=key, value=text, value_type=value_type))
    if problems:
        raise InvalidParametersError(rule_type, problems)
    return records
