"""
Rules component models: persisted rule shapes and registry introspection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal
from uuid import UUID, uuid4

from headless_cms.domain.rules import Capability, ParameterSpec

RuleKind = Literal["validation", "transformation"]
ValueType = Literal["string", "integer", "number", "boolean", "null"]


@dataclass(frozen=True)
class RuleParameterRecord:
    """A rule parameter as stored: string value plus a type tag."""

    key: str
    value: str
    value_type: ValueType


@dataclass(frozen=True)
class RuleRecord:
    """A configured rule as stored alongside its field."""

    type: str
    parameters: tuple[RuleParameterRecord, ...] = ()
    id: UUID = field(default_factory=uuid4)
    field_id: UUID | None = None


@dataclass(frozen=True)
class RuleDefinition:
    """A rule reference as supplied by an authoring request."""

    type: str
    parameters: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RuleTypeInfo:
    """Description of a registered rule type for tooling."""

    type: str
    kind: RuleKind
    capability: Capability
    description: str
    parameters: tuple[ParameterSpec, ...]
