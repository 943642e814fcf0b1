"""
Custom exceptions for the field-grants system.
"""

from __future__ import annotations

from typing import Optional


class FieldGrantsError(Exception):
    """Base exception for all field-grants errors."""
    pass


class SchemaNotLoadedError(FieldGrantsError):
    """Raised when a traversal is requested before a schema snapshot is available."""

    def __init__(self, message: str = "Schema graph is not loaded"):
        super().__init__(message)


class ConfigurationError(FieldGrantsError):
    """Raised when the deployment is misconfigured (no authority, invalid traversal config)."""
    pass


class UpstreamError(FieldGrantsError):
    """Raised when a remote permission authority call fails."""

    def __init__(self, service: str, status_code: int, message: str, group_id: Optional[str] = None):
        self.service = service
        self.status_code = status_code
        self.group_id = group_id
        super().__init__(
            f"Authority '{service}' returned {status_code}"
            f"{f' for group {group_id}' if group_id else ''}: {message}"
        )
