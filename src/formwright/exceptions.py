"""Exception hierarchy for formwright."""

from __future__ import annotations


class FormwrightError(Exception):
    """Base exception for all formwright errors."""


class ConfigurationError(FormwrightError):
    """Missing credential or misconfigured model roster. Fatal, never retried."""


class CompletionServiceError(FormwrightError):
    """Raised when a completion call fails and should not be retried (4xx)."""


class TransientServiceError(CompletionServiceError):
    """Timeout, rate limit, connection failure or 5xx. Retried once."""


class MalformedOutputError(FormwrightError):
    """Completion was not JSON, or did not match the expected schema."""

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class RegistryViolationError(FormwrightError):
    """A synthesized field carries a type absent from the field type registry."""

    def __init__(self, field_type: str, field_id: str = "") -> None:
        super().__init__(
            f"Field {field_id or '<unnamed>'!s} has type {field_type!r}, "
            "which is not in the field type registry"
        )
        self.field_type = field_type
        self.field_id = field_id


class CountOverflowWarning(UserWarning):
    """A requested question count exceeded the maximum and was clamped."""


__all__ = [
    "FormwrightError",
    "ConfigurationError",
    "CompletionServiceError",
    "TransientServiceError",
    "MalformedOutputError",
    "RegistryViolationError",
    "CountOverflowWarning",
]
