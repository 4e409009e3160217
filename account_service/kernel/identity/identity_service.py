"""
Identity service for account registration and credential updates.
"""

import uuid
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from account_service.kernel.identity.exceptions import (
    ConflictError,
    CredentialMismatchError,
    NotFoundError,
    ValidationError,
)
from account_service.kernel.identity.jwt import TokenIssuer
from account_service.kernel.identity.password import PasswordHasher
from account_service.kernel.identity.repository import AccountRepository, IdentityRecord
from account_service.logging_config import get_logger
from account_service.schemas.auth import UserCreate, UserResponse, UserUpdate
from account_service.schemas.common import format_errors

logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def normalize_email(email: str) -> str:
    return email.lower().strip()


class IdentityService:
    """
    Service for user identity operations.

    Handles registration (with token issuance), profile reads and
    account updates including password rotation. Every operation either
    completes or leaves the stored record untouched.
    """

    def __init__(
        self,
        repository: AccountRepository,
        hasher: PasswordHasher,
        token_issuer: TokenIssuer,
    ):
        self.repository = repository
        self.hasher = hasher
        self.token_issuer = token_issuer

    @staticmethod
    def _validate(schema: Type[SchemaT], **fields: Any) -> SchemaT:
        try:
            return schema.model_validate(fields)
        except PydanticValidationError as e:
            # not chained: the pydantic error echoes raw input, passwords included
            raise ValidationError(format_errors(e.errors())) from None

    async def register(self, name: str, email: str, password: str) -> str:
        """
        Register a new user and issue a bearer token for it.

        Args:
            name: Display name
            email: Email address, unique across users
            password: Plain text password

        Returns:
            Signed bearer token for the new user

        Raises:
            ValidationError: If any field is missing or malformed
            ConflictError: If the email is already registered
            HashingError, RepositoryError, SigningError: On infrastructure failure
        """
        data = self._validate(UserCreate, name=name, email=email, password=password)
        email = normalize_email(data.email)
        # fail before anything is written if no token could be issued
        self.token_issuer.ensure_ready()

        if await self.repository.find_by_email(email):
            logger.info("Registration rejected: email already registered")
            raise ConflictError()

        password_hash = await self.hasher.hash_async(data.password)
        user = await self.repository.create(
            name=data.name,
            email=email,
            password_hash=password_hash,
        )
        token = self.token_issuer.issue(user.id)

        logger.info("User registered", extra={"user_id": str(user.id)})
        return token

    async def get_profile(self, user_id: uuid.UUID) -> UserResponse:
        """Get a user's profile without the password hash."""
        user = await self.repository.find_by_id(user_id)
        if not user:
            raise NotFoundError()
        return UserResponse.model_validate(user)

    async def update_account(
        self,
        user_id: uuid.UUID,
        name: Optional[str] = None,
        email: Optional[str] = None,
        old_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> UserResponse:
        """
        Update name, email and/or password of an authenticated user.

        The password changes only when ``old_password`` verifies against the
        stored hash and ``new_password`` does not. If that check fails nothing
        is written, including name and email changes.

        Args:
            user_id: The caller's ID, as established by token verification
            name: New display name (optional)
            email: New email (optional)
            old_password: Current password (required with new_password)
            new_password: Replacement password (required with old_password)

        Returns:
            The updated profile

        Raises:
            ValidationError: If input is malformed or only one password is given
            NotFoundError: If the user does not exist
            CredentialMismatchError: If the password checks fail
            ConflictError: If the new email is taken or the record changed concurrently
            HashingError, RepositoryError: On infrastructure failure
        """
        data = self._validate(
            UserUpdate,
            name=name,
            email=email,
            old_password=old_password,
            new_password=new_password,
        )

        user = await self.repository.find_by_id(user_id)
        if not user:
            raise NotFoundError()

        changes = self._profile_changes(user, data)

        if data.changes_password:
            old_matches = await self.hasher.verify_async(data.old_password, user.password_hash)
            if not old_matches or await self.hasher.verify_async(
                data.new_password, user.password_hash
            ):
                logger.warning("Password change rejected", extra={"user_id": str(user.id)})
                raise CredentialMismatchError()
            changes["password_hash"] = await self.hasher.hash_async(data.new_password)

        if not changes:
            return UserResponse.model_validate(user)

        updated = await self.repository.update_by_id(
            user.id,
            changes,
            expected_version=user.version,
        )

        logger.info(
            "User updated",
            extra={
                "user_id": str(user.id),
                "fields": sorted("password" if k == "password_hash" else k for k in changes),
            },
        )
        return UserResponse.model_validate(updated)

    @staticmethod
    def _profile_changes(user: IdentityRecord, data: UserUpdate) -> dict:
        changes = {}
        if data.name is not None and data.name != user.name:
            changes["name"] = data.name
        if data.email is not None:
            new_email = normalize_email(data.email)
            if new_email != user.email:
                changes["email"] = new_email
        return changes
