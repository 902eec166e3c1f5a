"""
Rule registry - maps rule type strings to factories that build bound rules.

Two registries exist per process, one for validation rules and one for
transformation rules. Both are populated once at startup by ``discover`` and
then read concurrently by every request. Registrations are published by
swapping in a new read-only mapping, so lookups never take a lock.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType, ModuleType
from typing import Any, Generic, TypeVar

from headless_cms.components.rules import builtin
from headless_cms.components.rules.codec import decode_parameters
from headless_cms.components.rules.models import RuleKind, RuleRecord, RuleTypeInfo
from headless_cms.domain.rules import (
    Rule,
    RuleNotRegisteredError,
    RuleRegistryError,
    TransformationRule,
    ValidationRule,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Rule)


@dataclass(frozen=True)
class _Registration(Generic[R]):
    rule_class: type[R]
    factory: Callable[[Mapping[str, Any]], R]


def _factory_for(rule_class: type[R]) -> Callable[[Mapping[str, Any]], R]:
    def build(parameters: Mapping[str, Any]) -> R:
        return rule_class().bind(parameters)

    return build


def _has_zero_arg_constructor(candidate: type) -> bool:
    try:
        inspect.signature(candidate).bind()
    except TypeError:
        return False
    except ValueError:
        # Signature not introspectable; treat as unusable.
        return False
    return True


class RuleRegistry(Generic[R]):
    """Registry of rule factories keyed by rule type."""

    def __init__(self, base: type[R], kind: RuleKind) -> None:
        self.base = base
        self.kind = kind
        self._registrations: Mapping[str, _Registration[R]] = MappingProxyType({})
        self._write_lock = threading.Lock()

    def _candidates(self, sources: Iterable[ModuleType | type]) -> list[type[R]]:
        seen: set[type] = set()
        found: list[type[R]] = []
        for source in sources:
            if inspect.isclass(source):
                members: Iterable[Any] = [source]
            elif inspect.ismodule(source):
                members = vars(source).values()
            else:
                raise TypeError(f"Cannot scan {source!r} for rules; expected a module or class.")

            for member in members:
                if not inspect.isclass(member) or member in seen:
                    continue
                if not issubclass(member, self.base) or inspect.isabstract(member):
                    continue
                seen.add(member)
                if not _has_zero_arg_constructor(member):
                    logger.debug("Skipping %s: no zero-argument constructor", member.__qualname__)
                    continue
                found.append(member)
        return found

    def discover(self, sources: Iterable[ModuleType | type]) -> list[str]:
        """
        Scan ``sources`` and register every concrete rule class found.

        A throwaway instance of each class is created to read its ``type``.
        Later registrations of a type replace earlier ones. Returns the rule
        types registered by this call, in discovery order.
        """
        registered: list[str] = []
        with self._write_lock:
            registrations = dict(self._registrations)
            for candidate in self._candidates(sources):
                sample = candidate()
                rule_type = sample.type
                if not rule_type:
                    logger.warning(
                        "Skipping %s rule %s: empty type identifier",
                        self.kind,
                        candidate.__qualname__,
                    )
                    continue
                previous = registrations.get(rule_type)
                if previous is not None and previous.rule_class is not candidate:
                    logger.info(
                        "%s rule '%s' from %s replaces %s",
                        self.kind.capitalize(),
                        rule_type,
                        candidate.__module__,
                        previous.rule_class.__module__,
                    )
                registrations[rule_type] = _Registration(candidate, _factory_for(candidate))
                registered.append(rule_type)
            self._registrations = MappingProxyType(registrations)

        logger.info("Discovered %d %s rule(s): %s", len(registered), self.kind, ", ".join(registered))
        return registered

    def create(self, rule_type: str, parameters: Mapping[str, Any] | None = None) -> R:
        """
        Build a new rule of ``rule_type`` bound to ``parameters``.

        Raises RuleNotRegisteredError or InvalidParametersError.
        """
        registration = self._registrations.get(rule_type)
        if registration is None:
            raise RuleNotRegisteredError(rule_type, self.kind)
        return registration.factory(parameters or {})

    def try_create(
        self, rule_type: str, parameters: Mapping[str, Any] | None = None
    ) -> tuple[R | None, bool]:
        try:
            return self.create(rule_type, parameters), True
        except RuleRegistryError:
            return None, False

    def create_from_record(self, record: RuleRecord) -> R:
        """Build a rule from its stored form."""
        return self.create(record.type, decode_parameters(record.type, record.parameters))

    def is_registered(self, rule_type: str) -> bool:
        return rule_type in self._registrations

    def list_registered_types(self) -> frozenset[str]:
        return frozenset(self._registrations)

    def get_all_rules(self) -> list[str]:
        return sorted(self._registrations)

    def describe(self) -> list[RuleTypeInfo]:
        infos = []
        for rule_type in sorted(self._registrations):
            rule_class = self._registrations[rule_type].rule_class
            infos.append(
                RuleTypeInfo(
                    type=rule_type,
                    kind=self.kind,
                    capability=rule_class.required_capability,
                    description=rule_class.description,
                    parameters=rule_class.parameter_specs,
                )
            )
        return infos


@dataclass(frozen=True)
class RuleRegistries:
    """The validation and transformation registries used by a process."""

    validation: RuleRegistry[ValidationRule]
    transformation: RuleRegistry[TransformationRule]

    @classmethod
    def build(cls, sources: Iterable[ModuleType | type] = ()) -> RuleRegistries:
        """Create both registries from the built-in rules plus ``sources``."""
        all_sources = [builtin, *sources]
        validation: RuleRegistry[ValidationRule] = RuleRegistry(ValidationRule, "validation")
        transformation: RuleRegistry[TransformationRule] = RuleRegistry(
            TransformationRule, "transformation"
        )
        validation.discover(all_sources)
        transformation.discover(all_sources)
        return cls(validation=validation, transformation=transformation)


# --- Process-wide registries ---

_registries: RuleRegistries | None = None


def init_registries(sources: Iterable[ModuleType | type] = ()) -> RuleRegistries:
    """
    Build the process-wide registries.

    Call once at startup, before any request handling. Discovery errors
    propagate to the caller.
    """
    global _registries
    _registries = RuleRegistries.build(sources)
    return _registries


def get_registries() -> RuleRegistries:
    if _registries is None:
        raise RuntimeError("Rule registries not initialized. Call init_registries() first.")
    return _registries


def reset_registries() -> None:
    """Reset process-wide registries (for testing only)."""
    global _registries
    _registries = None
