"""
Service-layer exceptions.

Services raise these (all ValueError subclasses) and routes translate them
into HTTP responses with `raise_http_error`.
"""
from fastapi import HTTPException, status


class NotFoundError(ValueError):
    """Requested row does not exist."""


class ConflictError(ValueError):
    """Request conflicts with current state (duplicate, already processed)."""


class PermissionDeniedError(ValueError):
    """Caller may not act on this row."""


class QuotaExceededError(ValueError):
    """Subscription has no remaining event quota."""


class ExternalServiceError(ValueError):
    """A third-party API (Stripe, Google) call failed."""


STATUS_BY_ERROR = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (QuotaExceededError, status.HTTP_402_PAYMENT_REQUIRED),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
]


def raise_http_error(error: ValueError):
    """Re-raise a service error as an HTTPException. Plain ValueError -> 400."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            raise HTTPException(status_code=status_code, detail=str(error)) from error
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error)) from error
