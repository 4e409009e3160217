"""Integration tests for the SQLAlchemy account repository (SQLite)."""

import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from account_service.database import create_engine_for
from account_service.kernel.identity.exceptions import (
    ConflictError,
    NotFoundError,
    RepositoryError,
    StaleRecordError,
)
from account_service.kernel.identity.repository import SqlAlchemyAccountRepository
from account_service.kernel.models import Base


@pytest_asyncio.fixture
async def db_session(tmp_path) -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh file-backed SQLite database."""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'repo.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def repo(db_session: AsyncSession) -> SqlAlchemyAccountRepository:
    return SqlAlchemyAccountRepository(db_session)


@pytest.mark.asyncio
async def test_create_assigns_id_and_version(repo):
    record = await repo.create(name="A", email="a@x.com", password_hash="$2b$04$hash")

    assert isinstance(record.id, uuid.UUID)
    assert record.version == 1
    assert record.created_at is not None
    assert await repo.find_by_id(record.id) == record
    assert await repo.find_by_email("a@x.com") == record


@pytest.mark.asyncio
async def test_find_missing(repo):
    assert await repo.find_by_id(uuid.uuid4()) is None
    assert await repo.find_by_email("nobody@x.com") is None


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(repo):
    await repo.create(name="A", email="a@x.com", password_hash="h1")

    with pytest.raises(ConflictError):
        await repo.create(name="B", email="a@x.com", password_hash="h2")


@pytest.mark.asyncio
async def test_update_bumps_version(repo):
    record = await repo.create(name="A", email="a@x.com", password_hash="h1")

    updated = await repo.update_by_id(
        record.id,
        {"name": "B", "password_hash": "h2"},
        expected_version=record.version,
    )

    assert updated.name == "B"
    assert updated.password_hash == "h2"
    assert updated.email == "a@x.com"
    assert updated.version == 2


@pytest.mark.asyncio
async def test_update_with_stale_version(repo):
    record = await repo.create(name="A", email="a@x.com", password_hash="h1")
    await repo.update_by_id(record.id, {"name": "B"})

    with pytest.raises(StaleRecordError):
        await repo.update_by_id(record.id, {"name": "C"}, expected_version=record.version)

    assert (await repo.find_by_id(record.id)).name == "B"


@pytest.mark.asyncio
async def test_update_missing_user(repo):
    with pytest.raises(NotFoundError):
        await repo.update_by_id(uuid.uuid4(), {"name": "B"}, expected_version=1)


@pytest.mark.asyncio
async def test_update_to_taken_email(repo):
    await repo.create(name="A", email="a@x.com", password_hash="h1")
    other = await repo.create(name="B", email="b@x.com", password_hash="h2")

    with pytest.raises(ConflictError):
        await repo.update_by_id(other.id, {"email": "a@x.com"})


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields(repo):
    record = await repo.create(name="A", email="a@x.com", password_hash="h1")

    with pytest.raises(ValueError):
        await repo.update_by_id(record.id, {"id": uuid.uuid4()})


def disk_failure(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("disk I/O error"))


@pytest.mark.asyncio
async def test_find_failure_is_wrapped(repo, db_session, monkeypatch):
    monkeypatch.setattr(db_session, "execute", disk_failure)

    with pytest.raises(RepositoryError) as exc_info:
        await repo.find_by_email("a@x.com")
    assert isinstance(exc_info.value.__cause__, OperationalError)

    with pytest.raises(RepositoryError):
        await repo.find_by_id(uuid.uuid4())


@pytest.mark.asyncio
async def test_create_failure_is_wrapped(repo, db_session, monkeypatch):
    monkeypatch.setattr(db_session, "flush", disk_failure)

    with pytest.raises(RepositoryError):
        await repo.create(name="A", email="a@x.com", password_hash="h1")

    monkeypatch.undo()
    assert await repo.find_by_email("a@x.com") is None


@pytest.mark.asyncio
async def test_update_failure_is_wrapped(repo, db_session, monkeypatch):
    record = await repo.create(name="A", email="a@x.com", password_hash="h1")
    await db_session.commit()
    monkeypatch.setattr(db_session, "execute", disk_failure)

    with pytest.raises(RepositoryError):
        await repo.update_by_id(record.id, {"name": "B"}, expected_version=record.version)

    monkeypatch.undo()
    assert (await repo.find_by_id(record.id)).name == "A"
