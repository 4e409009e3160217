"""
Errors raised by the identity core.

Messages are safe to show to a client: none of them ever carries a
plaintext password, a password hash or the signing key.
"""

from typing import Any, Dict, List, Optional


class IdentityError(Exception):
    """Base class for every identity core error."""

    default_message = "Identity operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(IdentityError):
    """Malformed or missing input. Carries every violated rule."""

    default_message = "Validation error"

    def __init__(self, errors: List[Dict[str, Any]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors


class ConflictError(IdentityError):
    """An identity with the same email already exists."""

    default_message = "identity already exists"


class StaleRecordError(ConflictError):
    """The record changed between read and conditional write."""

    default_message = "identity was modified concurrently"


class NotFoundError(IdentityError):
    """No identity with the given id."""

    default_message = "User not found"


class CredentialMismatchError(IdentityError):
    """Old password did not verify, or new password equals the current one."""

    default_message = "Passwords do not match"


class InfrastructureError(IdentityError):
    """Failure in a collaborator. Reported to clients as an opaque server error."""

    default_message = "Internal server error"


class RepositoryError(InfrastructureError):
    """The account store failed."""

    default_message = "Account store unavailable"


class HashingError(InfrastructureError):
    """The password hashing primitive failed."""

    default_message = "Password hashing failed"


class SigningError(InfrastructureError):
    """A token could not be signed."""

    default_message = "Token signing failed"
