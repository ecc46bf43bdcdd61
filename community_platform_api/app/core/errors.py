"""
Service-layer exceptions.

Services signal failures by raising these exceptions.  They subclass
``ValueError`` so callers that only care about "the request was not
acceptable" can keep catching ``ValueError``; endpoints use
``to_http_exception`` to map each kind to its HTTP status.
"""

from fastapi import HTTPException, status


class NotFoundError(ValueError):
    """A referenced entity does not exist."""


class PermissionDeniedError(ValueError):
    """The caller is authenticated but may not perform the action."""


class ValidationError(ValueError):
    """The input is malformed or violates a business rule."""


def to_http_exception(exc: ValueError) -> HTTPException:
    """Translate a service exception into an ``HTTPException``."""
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionDeniedError):
        status_code = status.HTTP_403_FORBIDDEN
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=status_code, detail=str(exc))
