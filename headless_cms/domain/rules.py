"""
Rule contracts shared by validation and transformation rules.

A rule is a pure function over a field value, identified by a stable ``type``
string and configured by a parameter mapping bound exactly once. Parameters
arrive as loosely typed scalars (strings, numbers, booleans) and are coerced
to the kinds each rule declares in ``parameter_specs``.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar, Literal, TypeVar

Capability = Literal["text", "numeric", "boolean", "any"]
ParameterKind = Literal["string", "integer", "number", "boolean"]

RuleT = TypeVar("RuleT", bound="Rule")

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})


class RuleRegistryError(Exception):
    """Base class for rule lookup and configuration failures."""


class RuleNotRegisteredError(RuleRegistryError):
    """Raised when no factory is registered for a rule type."""

    def __init__(self, rule_type: str, kind: str = "rule") -> None:
        self.rule_type = rule_type
        self.kind = kind
        super().__init__(f"No {kind} rule registered for type '{rule_type}'.")


class InvalidParametersError(RuleRegistryError):
    """Raised when rule parameters are missing, unknown or fail coercion."""

    def __init__(self, rule_type: str, problems: list[str]) -> None:
        self.rule_type = rule_type
        self.problems = problems
        super().__init__(f"Invalid parameters for rule '{rule_type}': {'; '.join(problems)}")


@dataclass(frozen=True)
class ParameterSpec:
    """Declared parameter of a rule."""

    name: str
    kind: ParameterKind
    required: bool = True
    default: Any = None
    description: str = ""


def coerce_value(kind: ParameterKind, raw: Any) -> Any:
    """
    Coerce a loosely typed scalar to ``kind``.

    Raises ValueError when the value cannot be represented as ``kind``.
    """
    if kind == "string":
        if isinstance(raw, str):
            return raw
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return str(raw)
        raise ValueError(f"expected a string, got {type(raw).__name__}")

    if kind == "integer":
        if isinstance(raw, bool):
            raise ValueError("expected an integer, got bool")
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float) and raw.is_integer():
            return int(raw)
        if isinstance(raw, str):
            try:
                return int(raw.strip())
            except ValueError:
                raise ValueError(f"'{raw}' is not an integer") from None
        raise ValueError(f"expected an integer, got {type(raw).__name__}")

    if kind == "number":
        if isinstance(raw, bool):
            raise ValueError("expected a number, got bool")
        if isinstance(raw, (int, float)):
            number = float(raw)
        elif isinstance(raw, str):
            try:
                number = float(raw.strip())
            except ValueError:
                raise ValueError(f"'{raw}' is not a number") from None
        else:
            raise ValueError(f"expected a number, got {type(raw).__name__}")
        if not math.isfinite(number):
            raise ValueError(f"'{raw}' is not a finite number")
        return number

    if kind == "boolean":
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, int) and raw in (0, 1):
            return bool(raw)
        if isinstance(raw, str):
            lowered = raw.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise ValueError(f"'{raw}' is not a boolean")
        raise ValueError(f"expected a boolean, got {type(raw).__name__}")

    raise ValueError(f"unsupported parameter kind '{kind}'")


def bind_parameters(
    rule_type: str,
    specs: tuple[ParameterSpec, ...],
    raw: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Validate and coerce a raw parameter mapping against ``specs``.

    Unknown keys, missing required keys and coercion failures are all
    collected and raised together as InvalidParametersError.
    """
    problems: list[str] = []
    known = {spec.name for spec in specs}

    for key in raw:
        if key not in known:
            problems.append(f"unknown parameter '{key}'")

    bound: dict[str, Any] = {}
    for spec in specs:
        value = raw.get(spec.name)
        if value is None:
            if spec.required:
                problems.append(f"missing required parameter '{spec.name}'")
            else:
                bound[spec.name] = spec.default
            continue
        try:
            bound[spec.name] = coerce_value(spec.kind, value)
        except ValueError as e:
            problems.append(f"parameter '{spec.name}': {e}")

    if problems:
        raise InvalidParametersError(rule_type, problems)
    return bound


class Rule(ABC):
    """
    Base for all rules.

    Subclasses declare ``type``, ``required_capability`` and
    ``parameter_specs`` as class attributes and must stay constructible with
    no arguments so the registry can sample them during discovery.
    """

    type: ClassVar[str] = ""
    required_capability: ClassVar[Capability] = "any"
    parameter_specs: ClassVar[tuple[ParameterSpec, ...]] = ()
    description: ClassVar[str] = ""

    def __init__(self) -> None:
        self._parameters: Mapping[str, Any] = MappingProxyType({})
        self._bound = False

    def bind(self: RuleT, parameters: Mapping[str, Any] | None = None) -> RuleT:
        """Bind parameters once; returns self for chaining."""
        if self._bound:
            raise RuntimeError(f"Parameters of rule '{self.type}' are already bound.")
        self._parameters = MappingProxyType(
            bind_parameters(self.type, self.parameter_specs, parameters or {})
        )
        self._on_bound()
        self._bound = True
        return self

    def _on_bound(self) -> None:
        """Hook for precomputing state from bound parameters."""

    @property
    def parameters(self) -> Mapping[str, Any]:
        return self._parameters

    @property
    def is_bound(self) -> bool:
        return self._bound

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._parameters)!r})"


class ValidationRule(Rule):
    """A rule that inspects a value and reports error messages."""

    @abstractmethod
    def validate(self, value: Any) -> list[str]:
        """Return error messages for ``value``; an empty list means valid."""
        ...


class TransformationRule(Rule):
    """A rule that maps a value to a new value."""

    # Rules that set this receive None instead of being skipped.
    handles_none: ClassVar[bool] = False

    @abstractmethod
    def apply(self, value: Any) -> Any:
        """Return the transformed value."""
        ...
