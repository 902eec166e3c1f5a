"""
Rules component - rule registry, built-in rules and parameter codec.
"""

from headless_cms.domain.rules import (
    InvalidParametersError,
    ParameterSpec,
    Rule,
    RuleNotRegisteredError,
    RuleRegistryError,
    TransformationRule,
    ValidationRule,
)

from .codec import decode_parameters, encode_parameters
from .component import (
    RuleRegistries,
    RuleRegistry,
    get_registries,
    init_registries,
    reset_registries,
)
from .models import (
    RuleDefinition,
    RuleKind,
    RuleParameterRecord,
    RuleRecord,
    RuleTypeInfo,
)
from .ports import RuleSourcePort

__all__ = [
    # Registry
    "RuleRegistries",
    "RuleRegistry",
    "get_registries",
    "init_registries",
    "reset_registries",
    # Codec
    "decode_parameters",
    "encode_parameters",
    # Contracts
    "ParameterSpec",
    "Rule",
    "TransformationRule",
    "ValidationRule",
    # Errors
    "InvalidParametersError",
    "RuleNotRegisteredError",
    "RuleRegistryError",
    # Models
    "RuleDefinition",
    "RuleKind",
    "RuleParameterRecord",
    "RuleRecord",
    "RuleTypeInfo",
    # Ports
    "RuleSourcePort",
]
