"""Domain exceptions raised by the service layer.

Routers translate these into HTTP responses; services never raise
``HTTPException`` themselves.
"""
from typing import Optional


class KoperasiError(Exception):
    """Base exception for all koperasi service errors."""


class ValidationError(KoperasiError, ValueError):
    """Malformed or out-of-range input. Never retried automatically."""


class DuplicateError(ValidationError):
    """A unique field (e.g. NIK) is already taken."""


class NotFoundError(KoperasiError, LookupError):
    """A referenced loan, payment, member or external reference does not exist."""


class BackendUnavailable(KoperasiError):
    """The storage layer could not be reached or rejected the operation.

    ``payment_id`` / ``invoice_id`` are set when some work was already
    persisted (or created at the gateway) before the failure, so callers can
    tell "nothing happened" apart from "recorded but not reconciled".
    """

    def __init__(self, message: str, payment_id: Optional[str] = None, invoice_id: Optional[str] = None):
        super().__init__(message)
        self.payment_id = payment_id
        self.invoice_id = invoice_id


class GatewayError(KoperasiError):
    """The payment gateway rejected or could not process the request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
