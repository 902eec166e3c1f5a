"""
Built-in validation and transformation rules.

These are always registered; plugin modules may override any of them by
declaring a rule with the same ``type``.
"""

from __future__ import annotations

import re
from typing import Any

from headless_cms.domain.rules import (
    InvalidParametersError,
    ParameterSpec,
    TransformationRule,
    ValidationRule,
)

NOT_STRING_ERROR = "Value must be string."


# --- Validation rules ---


class MaximumLengthValidationRule(ValidationRule):
    type = "MaximumLengthValidationRule"
    required_capability = "text"
    description = "Rejects strings longer than the configured length."
    parameter_specs = (ParameterSpec("max-length", "integer"),)

    def validate(self, value: Any) -> list[str]:
        if not isinstance(value, str):
            return [NOT_STRING_ERROR]
        max_length = self.parameters["max-length"]
        if len(value) > max_length:
            return [f"Maximum length is {max_length}."]
        return []


class MinimumLengthValidationRule(ValidationRule):
    type = "MinimumLengthValidationRule"
    required_capability = "text"
    description = "Rejects strings shorter than the configured length."
    parameter_specs = (ParameterSpec("min-length", "integer"),)

    def validate(self, value: Any) -> list[str]:
        if not isinstance(value, str):
            return [NOT_STRING_ERROR]
        min_length = self.parameters["min-length"]
        if len(value) < min_length:
            return [f"Minimum length is {min_length}."]
        return []


class RegexRule(ValidationRule):
    type = "RegexRule"
    required_capability = "text"
    description = "Requires the value to contain a match for a regular expression."
    parameter_specs = (ParameterSpec("regex", "string"),)

    def __init__(self) -> None:
        super().__init__()
        self._pattern: re.Pattern[str] | None = None

    def _on_bound(self) -> None:
        try:
            self._pattern = re.compile(self.parameters["regex"])
        except re.error as e:
            raise InvalidParametersError(self.type, [f"parameter 'regex': {e}"]) from e

    def validate(self, value: Any) -> list[str]:
        if not isinstance(value, str):
            return [NOT_STRING_ERROR]
        if self._pattern is None or self._pattern.search(value) is None:
            return [f"Value does not match pattern '{self.parameters.get('regex')}'."]
        return []


class IsLowercaseRule(ValidationRule):
    type = "IsLowercaseRule"
    required_capability = "text"
    description = "Rejects strings containing uppercase characters."

    def validate(self, value: Any) -> list[str]:
        if not isinstance(value, str):
            return [NOT_STRING_ERROR]
        if any(ch.isupper() for ch in value):
            return [f"String {value} is not lowercase"]
        return []


class NumericRangeRule(ValidationRule):
    type = "NumericRangeRule"
    required_capability = "numeric"
    description = "Bounds a numeric value by optional inclusive minimum and maximum."
    parameter_specs = (
        ParameterSpec("min", "number", required=False),
        ParameterSpec("max", "number", required=False),
    )

    def _on_bound(self) -> None:
        low, high = self.parameters["min"], self.parameters["max"]
        if low is not None and high is not None and low > high:
            raise InvalidParametersError(self.type, ["'min' must not be greater than 'max'"])

    def validate(self, value: Any) -> list[str]:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return ["Value must be a number."]
        errors = []
        low, high = self.parameters["min"], self.parameters["max"]
        if low is not None and number < low:
            errors.append(f"Value must be at least {low:g}.")
        if high is not None and number > high:
            errors.append(f"Value must be at most {high:g}.")
        return errors


# --- Transformation rules ---


class TruncateByLength(TransformationRule):
    type = "TruncateByLength"
    required_capability = "text"
    description = "Cuts strings down to the configured length."
    parameter_specs = (ParameterSpec("truncationLength", "integer"),)

    def _on_bound(self) -> None:
        if self.parameters["truncationLength"] < 0:
            raise InvalidParametersError(self.type, ["Truncation length must be non-negative."])

    def apply(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        length = self.parameters["truncationLength"]
        if length == 0:
            return ""
        return value[:length]


class Trim(TransformationRule):
    type = "Trim"
    required_capability = "text"
    description = "Strips leading and trailing whitespace."

    def apply(self, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class Uppercase(TransformationRule):
    type = "Uppercase"
    required_capability = "text"
    description = "Converts strings to upper case."

    def apply(self, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class Lowercase(TransformationRule):
    type = "Lowercase"
    required_capability = "text"
    description = "Converts strings to lower case."

    def apply(self, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value
