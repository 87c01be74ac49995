"""Exception hierarchy for the ADF to Markdown converter."""
from __future__ import annotations

from typing import Any


class AdfMdError(RuntimeError):
    """Base exception that carries structured context."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class DocumentDecodeError(AdfMdError):
    """Raised when a value does not match the document node shape."""

    @property
    def raw(self) -> str:
        return str(self.context.get("raw", ""))


class ExternalRendererError(AdfMdError):
    """Raised when the external ``adf2md`` tool cannot produce output."""


class ConfigError(AdfMdError):
    """Raised when configuration validation fails."""


__all__ = [
    "AdfMdError",
    "DocumentDecodeError",
    "ExternalRendererError",
    "ConfigError",
]
