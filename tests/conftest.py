"""
Pytest fixtures for account service tests.
"""

import dataclasses
import os
import tempfile
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Configure before any account_service import: settings and the engine are module-level
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest

from account_service.config import get_settings
get_settings.cache_clear()

from account_service.kernel.identity.exceptions import (
    ConflictError,
    NotFoundError,
    StaleRecordError,
)
from account_service.kernel.identity.identity_service import IdentityService
from account_service.kernel.identity.jwt import TokenIssuer
from account_service.kernel.identity.password import PasswordHasher
from account_service.kernel.identity.repository import IdentityRecord

TEST_SECRET_KEY = "test-secret-key-for-testing-only"


class InMemoryAccountRepository:
    """AccountRepository kept in a dict; counts writes for assertions."""

    def __init__(self):
        self.records: Dict[uuid.UUID, IdentityRecord] = {}
        self.writes = 0

    async def find_by_email(self, email: str) -> Optional[IdentityRecord]:
        return next((r for r in self.records.values() if r.email == email), None)

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[IdentityRecord]:
        return self.records.get(user_id)

    async def create(self, name: str, email: str, password_hash: str) -> IdentityRecord:
        if await self.find_by_email(email):
            raise ConflictError()
        now = datetime.now(timezone.utc)
        record = IdentityRecord(
            id=uuid.uuid4(),
            name=name,
            email=email,
            password_hash=password_hash,
            version=1,
            created_at=now,
            updated_at=now,
        )
        self.records[record.id] = record
        self.writes += 1
        return record

    async def update_by_id(
        self,
        user_id: uuid.UUID,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> IdentityRecord:
        current = self.records.get(user_id)
        if current is None:
            raise NotFoundError()
        if expected_version is not None and current.version != expected_version:
            raise StaleRecordError()
        email = changes.get("email")
        if email and any(r.email == email and r.id != user_id for r in self.records.values()):
            raise ConflictError()
        updated = dataclasses.replace(
            current,
            **changes,
            version=current.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        self.records[user_id] = updated
        self.writes += 1
        return updated


def pytest_sessionfinish(session, exitstatus):
    """Clean up temp DB file after test run."""
    for suffix in ("", "-wal", "-shm"):
        path = TEST_DB_PATH + suffix
        if os.path.exists(path):
            os.unlink(path)


@pytest.fixture
def hasher() -> PasswordHasher:
    """Cheap bcrypt cost so the suite stays fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret_key=TEST_SECRET_KEY)


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def identity_service(repository, hasher, token_issuer) -> IdentityService:
    return IdentityService(
        repository=repository,
        hasher=hasher,
        token_issuer=token_issuer,
    )
