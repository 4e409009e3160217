"""
Account repository: the durable store of identity records.

The identity service only sees ``AccountRepository`` and ``IdentityRecord``.
``SqlAlchemyAccountRepository`` is the production implementation.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from account_service.kernel.identity.exceptions import (
    ConflictError,
    NotFoundError,
    RepositoryError,
    StaleRecordError,
)
from account_service.kernel.models.user import User

UPDATABLE_FIELDS = frozenset({"name", "email", "password_hash"})


@dataclass(frozen=True)
class IdentityRecord:
    """Snapshot of one stored identity."""

    id: uuid.UUID
    name: str
    email: str
    password_hash: str
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __repr__(self) -> str:
        # never renders password_hash
        return f"IdentityRecord(id={self.id!s}, email={self.email!r}, version={self.version})"


class AccountRepository(Protocol):
    """Storage contract consumed by the identity service."""

    async def find_by_email(self, email: str) -> Optional[IdentityRecord]:
        ...

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[IdentityRecord]:
        ...

    async def create(self, name: str, email: str, password_hash: str) -> IdentityRecord:
        ...

    async def update_by_id(
        self,
        user_id: uuid.UUID,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> IdentityRecord:
        ...


def _to_record(user: User) -> IdentityRecord:
    return IdentityRecord(
        id=user.id,
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        version=user.version,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class SqlAlchemyAccountRepository:
    """
    AccountRepository backed by the ``users`` table.

    Writes are flushed, not committed; the session owner commits or rolls
    back the unit of work.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, user_id: uuid.UUID) -> Optional[User]:
        query = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[IdentityRecord]:
        """Get a user by email."""
        try:
            result = await self.session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError() from e
        return _to_record(user) if user else None

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[IdentityRecord]:
        """Get a user by ID."""
        try:
            user = await self._get(user_id)
        except SQLAlchemyError as e:
            raise RepositoryError() from e
        return _to_record(user) if user else None

    async def create(self, name: str, email: str, password_hash: str) -> IdentityRecord:
        """
        Insert a new user and return it with its assigned id.

        Raises:
            ConflictError: If the email is already taken
            RepositoryError: On any other store failure
        """
        user = User(name=name, email=email, password_hash=password_hash, version=1)
        self.session.add(user)
        try:
            await self.session.flush()
            await self.session.refresh(user)
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError() from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise RepositoryError() from e
        return _to_record(user)

    async def update_by_id(
        self,
        user_id: uuid.UUID,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> IdentityRecord:
        """
        Apply ``changes`` in one conditional UPDATE and bump the version.

        Args:
            user_id: The user's ID
            changes: Column values to write (name, email, password_hash)
            expected_version: If given, the write only applies at this version

        Raises:
            NotFoundError: If the user no longer exists
            StaleRecordError: If the version moved since it was read
            ConflictError: If the new email belongs to another user
            RepositoryError: On any other store failure
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(**changes, version=User.version + 1)
            .execution_options(synchronize_session=False)
        )
        if expected_version is not None:
            stmt = stmt.where(User.version == expected_version)

        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                if await self._get(user_id) is None:
                    raise NotFoundError()
                raise StaleRecordError()
            user = await self._get(user_id)
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError() from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise RepositoryError() from e
        return _to_record(user)
