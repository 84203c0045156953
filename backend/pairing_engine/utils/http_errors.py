"""
HTTP translation for pairing engine errors.

Services raise PairingEngineError subclasses; routes call raise_http() so the
response status and detail shape stay the same across every endpoint.
"""

from typing import NoReturn

from fastapi import HTTPException

from pairing_engine.services.errors import (
    NotFoundError,
    PairingConflictError,
    PairingEngineError,
    PairingValidationError,
    ReferentialIntegrityError,
)


def status_for(error: PairingEngineError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, (PairingConflictError, ReferentialIntegrityError)):
        return 409
    if isinstance(error, PairingValidationError):
        return 422
    return 400


def raise_http(error: PairingEngineError) -> NoReturn:
    """
    Raise the HTTPException matching a service error.

    404 NotFoundError, 409 PairingConflictError / ReferentialIntegrityError,
    422 PairingValidationError. Detail is {"code", "message", "context"?}.
    """
    raise HTTPException(status_code=status_for(error), detail=error.to_detail()) from error
