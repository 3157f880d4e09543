"""
services/errors.py — Typed service errors

Services raise these instead of HTTPException so they stay usable outside a
request. Each carries the HTTP status the app-level handler in main.py maps
it to. They subclass ValueError, so callers that catch ValueError keep working.

Taxonomy:
- InvalidInputError (400): bad input or an illegal state transition
- PermissionDeniedError (403): caller may not act on this record
- NotFoundError (404): record does not exist
- ConflictError (409): duplicate conversion, second accepted quote
- ProviderError (502): payment provider call failed
- DependencyUnavailableError (503): database unreachable mid-operation

Called by: all services, main.py exception handlers
"""

from contextlib import contextmanager

from sqlalchemy.exc import InterfaceError, OperationalError


class ServiceError(ValueError):
    status_code = 400
    code = "invalid_input"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        out = {"code": self.code, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class InvalidInputError(ServiceError):
    status_code = 400
    code = "invalid_input"


class PermissionDeniedError(ServiceError):
    status_code = 403
    code = "forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    code = "not_found"


class ConflictError(ServiceError):
    status_code = 409
    code = "conflict"


class ProviderError(ServiceError):
    status_code = 502
    code = "provider_error"


class DependencyUnavailableError(ServiceError):
    status_code = 503
    code = "dependency_unavailable"


@contextmanager
def storage_errors(action: str):
    """Re-raise a lost database connection as DependencyUnavailableError."""
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        raise DependencyUnavailableError(f"Storage unavailable while {action}") from e
