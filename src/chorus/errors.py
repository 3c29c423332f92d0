"""Application-level exception types for chorus."""

from __future__ import annotations

from chorus.types import Address


class ChorusError(Exception):
    """Base exception for chorus."""


class ConfigurationError(ChorusError):
    """Base exception for configuration and startup validation errors."""


class ApiKeyNotConfiguredError(ConfigurationError):
    """Raised when an API key is required but missing."""


class TemplateError(ChorusError):
    """Raised when a template cannot be turned into message batches."""


class CompletionResultError(ChorusError):
    """Raised when a completion connector returns something that is not a completion."""


class OutputAddressError(ChorusError):
    """Raised when an output path cannot hold the value written to it."""

    def __init__(self, path: Address, reason: str) -> None:
        rendered = "/".join(str(part) for part in path) or "<root>"
        super().__init__(f"Invalid output address '{rendered}': {reason}")
        self.path = path
        self.reason = reason
