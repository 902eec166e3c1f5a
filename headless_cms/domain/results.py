"""
Result and error contract returned by core operations.

Every operation returns a Result: a success carrying a value, a failure
carrying an Error, or a validation failure carrying one error list per field.
Validation failures are data, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

ErrorKind = Literal[
    "not_found",
    "conflict",
    "forbidden",
    "unauthorized",
    "infrastructure",
    "validation",
]

T = TypeVar("T")


@dataclass(frozen=True)
class Error:
    """A failed operation's kind and human readable message."""

    kind: ErrorKind
    message: str

    @classmethod
    def not_found(cls, message: str) -> Error:
        return cls("not_found", message)

    @classmethod
    def conflict(cls, message: str) -> Error:
        return cls("conflict", message)

    @classmethod
    def forbidden(cls, message: str) -> Error:
        return cls("forbidden", message)

    @classmethod
    def unauthorized(cls, message: str) -> Error:
        return cls("unauthorized", message)

    @classmethod
    def infrastructure(cls, message: str) -> Error:
        return cls("infrastructure", message)

    @classmethod
    def validation(cls, message: str) -> Error:
        return cls("validation", message)


@dataclass
class ValidationResult:
    """Ordered error messages collected for a single named field."""

    field_name: str
    errors: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def is_invalid(self) -> bool:
        return len(self.errors) > 0

    @property
    def is_valid(self) -> bool:
        return not self.is_invalid


@dataclass
class MultiFieldValidationResult:
    """Validation results for several fields, keyed by field name."""

    results: dict[str, ValidationResult] = field(default_factory=dict)

    def add(self, result: ValidationResult) -> None:
        """Merge a field result; valid results are ignored."""
        if result.is_valid:
            return
        existing = self.results.get(result.field_name)
        if existing is None:
            self.results[result.field_name] = ValidationResult(
                result.field_name, list(result.errors)
            )
        else:
            existing.errors.extend(result.errors)

    def add_error(self, field_name: str, message: str) -> None:
        self.add(ValidationResult(field_name, [message]))

    @property
    def is_invalid(self) -> bool:
        return any(r.is_invalid for r in self.results.values())

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(r.errors) for name, r in self.results.items()}


VALIDATION_FAILED_MESSAGE = "One or more fields failed validation."


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Tagged outcome of a core operation.

    Exactly one of ``value`` (on success) or ``error`` (on failure) is
    meaningful. Validation failures carry an Error of kind ``validation``
    plus the per-field details in ``field_errors``.
    """

    value: T | None = None
    error: Error | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def is_validation_failure(self) -> bool:
        return self.error is not None and self.error.kind == "validation"

    @classmethod
    def ok(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, error: Error) -> Result[T]:
        if error is None:
            raise ValueError("Error must be provided for failure.")
        return cls(error=error)

    @classmethod
    def field_validation_failure(cls, result: ValidationResult) -> Result[T]:
        return cls(
            error=Error.validation(VALIDATION_FAILED_MESSAGE),
            field_errors={result.field_name: list(result.errors)},
        )

    @classmethod
    def multi_field_validation_failure(cls, result: MultiFieldValidationResult) -> Result[T]:
        return cls(
            error=Error.validation(VALIDATION_FAILED_MESSAGE),
            field_errors=result.to_dict(),
        )

    def unwrap(self) -> T:
        """Return the success value or raise if the result is a failure."""
        if self.error is not None:
            raise RuntimeError(f"Cannot unwrap failed result: {self.error.message}")
        return self.value  # type: ignore[return-value]

    def to_dict(self) -> dict[str, Any]:
        if self.error is None:
            return {"success": True}
        payload: dict[str, Any] = {
            "success": False,
            "kind": self.error.kind,
            "message": self.error.message,
        }
        if self.field_errors:
            payload["errors"] = {k: list(v) for k, v in self.field_errors.items()}
        return payload
