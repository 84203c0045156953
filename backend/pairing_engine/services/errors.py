"""
Pairing engine error taxonomy.

Every error carries a stable ``code`` so callers can tell which invariant was
violated. Routes translate these to HTTP responses:

- PairingValidationError     -> 422 (not retryable)
- PairingConflictError       -> 409 (retryable: re-fetch and re-run the call)
- ReferentialIntegrityError  -> 409 (delete the referencing pairing first)
- NotFoundError              -> 404
"""

from typing import Any, Dict, Optional


class PairingEngineError(Exception):
    """Base class for all pairing engine errors"""

    code = "PAIRING_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context or {}

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.context:
            detail["context"] = self.context
        return detail


class PairingValidationError(PairingEngineError):
    """Raised when input or a resulting pairing set violates an invariant"""

    code = "VALIDATION_ERROR"


class PairingConflictError(PairingEngineError):
    """Raised when concurrent writers collide on game number allocation"""

    code = "GAME_NUMBER_CONFLICT"


class ReferentialIntegrityError(PairingEngineError):
    """Raised when deleting a pairing that another pairing still references"""

    code = "PAIRING_REFERENCED"


class NotFoundError(PairingEngineError):
    """Raised when a division, team or game number does not exist"""

    code = "NOT_FOUND"
