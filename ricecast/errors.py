"""Error taxonomy shared by the engine, services and route edge.

Each error carries a stable ``code`` that routes expose as
``{"error": code, "details": [...]}``.  Subclassing the builtin
``ValueError`` / ``LookupError`` / ``PermissionError`` keeps the usual
``except`` clauses working for callers that do not know about this module.
"""

from __future__ import annotations


class RiceCastError(Exception):
    """Base class for all domain errors."""

    code = "internal_error"

    def __init__(self, message: str, *, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or [message]


class InputError(RiceCastError, ValueError):
    """Malformed or out-of-range input."""

    code = "invalid_input"


class ProviderError(RiceCastError):
    """Forecast or historical source unreachable or returned garbage."""

    code = "provider_unavailable"


class NotFoundError(RiceCastError, LookupError):
    """Unknown cycle, profile, analysis or baseline."""

    code = "not_found"


class OwnershipError(RiceCastError, PermissionError):
    """Caller does not own the requested resource."""

    code = "forbidden"
