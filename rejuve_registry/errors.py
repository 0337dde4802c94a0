"""
Registry errors.

Every failure carries a stable ``reason`` label that relayers key their
retry logic off, plus the human readable revert message.

Error hierarchy:
    RegistryError (base)
    ├── InvalidInput
    │   ├── ZeroAddress
    │   ├── EmptyField
    │   ├── ZeroNonce
    │   ├── InvalidAmount
    │   ├── ExpirationTooLong
    │   └── DuplicateData
    ├── Unauthorized
    ├── SignatureError
    │   ├── InvalidSignature
    │   └── SignatureMismatch
    ├── DigestReused
    ├── NotRegistered
    ├── AlreadyRegistered
    ├── NotDataOwner
    ├── Paused
    └── NonTransferable
"""

from typing import Any, Dict, Optional


class RegistryError(Exception):
    """Base error for all registry operations."""

    reason = "RegistryError"
    default_message = "REJUVE: Operation failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": self.reason, "message": self.message, "details": self.details}


class InvalidInput(RegistryError):
    reason = "InvalidInput"
    default_message = "REJUVE: Invalid input"


class ZeroAddress(InvalidInput):
    reason = "ZeroAddress"
    default_message = "REJUVE: Zero address"


class EmptyField(InvalidInput):
    """Raised when a required bytes/string field is empty."""

    reason = "EmptyField"

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"REJUVE: Empty {field}", {"field": field})
        self.field = field


class ZeroNonce(InvalidInput):
    reason = "ZeroNonce"
    default_message = "REJUVE: Zero nonce"


class InvalidAmount(InvalidInput):
    reason = "InvalidAmount"

    def __init__(self, field: str):
        super().__init__(f"REJUVE: {field} cannot be zero", {"field": field})
        self.field = field


class ExpirationTooLong(InvalidInput):
    reason = "ExpirationTooLong"
    default_message = "REJUVE: Expiration exceeds limit"


class DuplicateData(InvalidInput):
    reason = "DuplicateData"
    default_message = "REJUVE: Data already submitted"


class Unauthorized(RegistryError):
    """
    Raised when the caller lacks the required role or does not own the
    resource it is acting on.
    """

    reason = "Unauthorized"
    default_message = "REJUVE: Unauthorized"


class SignatureError(RegistryError):
    reason = "SignatureError"
    default_message = "REJUVE: Invalid signature"


class InvalidSignature(SignatureError):
    """Raised when a signature cannot be parsed or recovered."""

    reason = "InvalidSignature"
    default_message = "ECDSA: invalid signature"


class SignatureMismatch(SignatureError):
    """Raised when the recovered signer is not the claimed principal."""

    reason = "SignatureMismatch"
    default_message = "REJUVE: Invalid user signature"


class DigestReused(RegistryError):
    reason = "DigestReused"
    default_message = "REJUVE: Already used id"


class NotRegistered(RegistryError):
    reason = "NotRegistered"
    default_message = "REJUVE: Not Registered"


class AlreadyRegistered(RegistryError):
    reason = "AlreadyRegistered"
    default_message = "REJUVE: One Identity Per User"


class NotDataOwner(RegistryError):
    reason = "NotDataOwner"
    default_message = "REJUVE: Not a Data Owner"


class Paused(RegistryError):
    reason = "Paused"
    default_message = "Pausable: paused"


class NonTransferable(RegistryError):
    reason = "NonTransferable"
    default_message = "REJUVE: SoulBound Tokens are non-transferable"
