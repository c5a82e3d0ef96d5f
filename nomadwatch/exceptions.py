"""
Core exceptions for nomadwatch.

This module defines the exception hierarchy used throughout the package,
providing clear error types for the different ways a dependency fetch fails.
"""

from typing import Any, Dict, Optional


class DependencyError(Exception):
    """Base exception for all nomadwatch errors."""

    default_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class InvalidSelectorError(DependencyError):
    """Raised when a selector string does not match the query grammar."""

    default_code = "INVALID_SELECTOR"

    def __init__(self, kind: str, selector: str) -> None:
        super().__init__(
            f"{kind}: invalid format: {selector!r}",
            details={"kind": kind, "selector": selector},
        )
        self.kind = kind
        self.selector = selector


class StoppedError(DependencyError):
    """Raised when a fetch is attempted on a stopped dependency."""

    default_code = "STOPPED"

    def __init__(self, dependency: str) -> None:
        super().__init__(
            f"{dependency}: dependency stopped", details={"dependency": dependency}
        )
        self.dependency = dependency


class BackendError(DependencyError):
    """Raised when the backend call for a dependency fails."""

    default_code = "BACKEND_ERROR"

    def __init__(self, dependency: str, cause: Exception) -> None:
        super().__init__(
            f"{dependency}: {cause}",
            details={"dependency": dependency, "cause": type(cause).__name__},
        )
        self.dependency = dependency
        self.cause = cause


class MalformedFieldError(BackendError):
    """Raised when a returned entry carries a field that cannot be decomposed."""

    default_code = "MALFORMED_FIELD"

    def __init__(self, dependency: str, field: str, value: str) -> None:
        super().__init__(
            dependency, ValueError(f"malformed {field}: {value!r}")
        )
        self.details.update({"field": field, "value": value})
        self.field = field
        self.value = value


class ClientError(DependencyError):
    """Raised when the backend client cannot complete a request."""

    default_code = "CLIENT_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code


class ConfigurationError(DependencyError):
    """Raised when configuration is invalid or missing."""

    default_code = "CONFIGURATION_ERROR"


class SerializationError(DependencyError):
    """Raised when snapshot records cannot be encoded or decoded."""

    default_code = "SERIALIZATION_ERROR"
