"""
Structured error types for the execution spec layer.

Every failure raised while materializing or mutating an execution spec is
one of three kinds, and each renders as ``"<Kind>: <detail>"``. Downstream
callers (the run-submission backend, the recurring-run controller) match on
that prefix, so the string form is part of the compatibility contract.

Manifesto:
    - **Typed kinds:** Input problems, configuration gaps, and parameter
      mismatches are distinct types, not one generic exception
    - **Stable messages:** ``str(error)`` never changes shape
    - **Rich context:** Errors carry the execution type and name for logging
    - **Error chaining:** The decoding failure that caused an
      ``InvalidInputError`` is preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      ExecSpecError                           │
        │           (category, context, cause, detail)                 │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  InvalidInputError    InternalServerError    ValidationError │
        │  (VALIDATION)         (INTERNAL)             (VALIDATION)    │
        │  empty / unparseable  engine type has        undeclared      │
        │  bytes, wrong host    no adapter             parameter names │
        │  object type                                                 │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> str(InvalidInputError("empty input"))
    'InvalidInputError: empty input'
    >>> str(InternalServerError("type:PipelineRun: ExecutionType is not supported"))
    'InternalServerError: type:PipelineRun: ExecutionType is not supported'

Guardrails:
    ❌ DON'T: Raise from introspection methods - they return empty values
    ✅ DO: Raise only while constructing or validating a spec

    ❌ DON'T: Build the "<Kind>: " prefix by hand at the raise site
    ✅ DO: Pass the bare detail; the error type adds its own prefix

Tags:
    error-handling, exception-hierarchy, execution-spec, compatibility

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories used to route and report execution spec errors."""

    VALIDATION = "VALIDATION"  # Bad input, undeclared parameters
    PARSE = "PARSE"            # Undecodable serialized form
    INTERNAL = "INTERNAL"      # Missing adapter, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        execution_type: Engine type tag involved (e.g. ``"Workflow"``)
        execution_name: Name or generate-name of the resource
        parameter: Parameter name, for parameter-level failures
        metadata: Additional key-value pairs
    """

    execution_type: str | None = None
    execution_name: str | None = None
    parameter: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["execution_type", "execution_name", "parameter"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ExecSpecError(Exception):
    """
    Base exception for all execution spec errors.

    The message passed in is the bare *detail*; ``str()`` prepends the kind
    name so every error reads ``"<Kind>: <detail>"``.

    Examples:
        >>> error = ExecSpecError("something broke")
        >>> error.detail
        'something broke'
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    kind: str = "ExecSpecError"

    def __init__(
        self,
        detail: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        self.detail = detail
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause
        super().__init__(f"{self.kind}: {detail}")
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self) -> str:
        """Full prefixed message, identical to ``str(error)``."""
        return f"{self.kind}: {self.detail}"

    def with_context(self, **kwargs: Any) -> ExecSpecError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InvalidInputError("empty input").with_context(execution_type="Workflow")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.detail!r}, category={self.category.value})"


class InvalidInputError(ExecSpecError):
    """Malformed or empty serialized input, or a host object of the wrong type."""

    default_category = ErrorCategory.VALIDATION
    kind = "InvalidInputError"


class InternalServerError(ExecSpecError):
    """An engine type was requested that no adapter implements."""

    default_category = ErrorCategory.INTERNAL
    kind = "InternalServerError"


class ValidationError(ExecSpecError):
    """Requested parameter names do not match the declared parameters."""

    default_category = ErrorCategory.VALIDATION
    kind = "ValidationError"

    def __init__(
        self,
        detail: str,
        *,
        unknown_parameters: list[str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(detail, **kwargs)
        self.unknown_parameters = unknown_parameters or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.unknown_parameters:
            result["unknown_parameters"] = list(self.unknown_parameters)
        return result


# =============================================================================
# CONSTRUCTORS FOR THE STABLE MESSAGES
# =============================================================================


def unmarshal_error(cause: Exception | str) -> InvalidInputError:
    """Build the ``Failed to unmarshal the inputs`` error for a decode failure."""
    exc = cause if isinstance(cause, Exception) else None
    return InvalidInputError(f"Failed to unmarshal the inputs: {cause}", category=ErrorCategory.PARSE, cause=exc)


def unsupported_execution_type(execution_type: Any) -> InternalServerError:
    """Build the error raised when no adapter exists for *execution_type*."""
    tag = getattr(execution_type, "value", execution_type)
    return InternalServerError(f"type:{tag}: ExecutionType is not supported").with_context(
        execution_type=str(tag)
    )


def is_invalid_input(error: Exception) -> bool:
    """Check if an error is an input error the caller can correct."""
    return isinstance(error, (InvalidInputError, ValidationError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ExecSpecError",
    "InvalidInputError",
    "InternalServerError",
    "ValidationError",
    "unmarshal_error",
    "unsupported_execution_type",
    "is_invalid_input",
]
