"""
Identity Core - password hashing, token issuance and account flows.
"""

from account_service.kernel.identity.password import PasswordHasher
from account_service.kernel.identity.jwt import TokenIssuer, TokenPayload
from account_service.kernel.identity.repository import (
    AccountRepository,
    IdentityRecord,
    SqlAlchemyAccountRepository,
)
from account_service.kernel.identity.identity_service import IdentityService
from account_service.kernel.identity.exceptions import (
    IdentityError,
    ValidationError,
    ConflictError,
    StaleRecordError,
    NotFoundError,
    CredentialMismatchError,
    InfrastructureError,
    RepositoryError,
    HashingError,
    SigningError,
)

__all__ = [
    "PasswordHasher",
    "TokenIssuer",
    "TokenPayload",
    "AccountRepository",
    "IdentityRecord",
    "SqlAlchemyAccountRepository",
    "IdentityService",
    # Errors
    "IdentityError",
    "ValidationError",
    "ConflictError",
    "StaleRecordError",
    "NotFoundError",
    "CredentialMismatchError",
    "InfrastructureError",
    "RepositoryError",
    "HashingError",
    "SigningError",
]
