"""Domain error taxonomy.

Services raise these; the HTTP layer turns them into ``ErrorResponse`` bodies
with the matching status code (see ``portal.main``).
"""
from __future__ import annotations

from typing import Any


class PortalError(Exception):
    """Base error for the portal core."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, *, details: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class AuthenticationError(PortalError):
    """No valid identity on the request."""

    status_code = 401
    code = "authentication_required"


class AuthorizationError(PortalError):
    """Valid identity, insufficient role or ownership."""

    status_code = 403
    code = "forbidden"


class ValidationError(PortalError):
    """Malformed or missing input."""

    status_code = 400
    code = "validation_error"


class NotFoundError(PortalError):
    """Referenced entity does not exist (or is not visible to the caller)."""

    status_code = 404
    code = "not_found"


class InvalidStateError(PortalError):
    """Transition not legal from the current state."""

    status_code = 409
    code = "invalid_state"


class ConflictError(PortalError):
    status_code = 409
    code = "conflict"


class InternalError(PortalError):
    status_code = 500
    code = "internal_error"
