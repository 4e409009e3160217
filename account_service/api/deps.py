"""
FastAPI dependencies for authentication, database sessions and service wiring.
"""

import uuid
from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from account_service.config import get_settings
from account_service.database import async_session_maker
from account_service.kernel.identity.exceptions import RepositoryError
from account_service.kernel.identity.identity_service import IdentityService
from account_service.kernel.identity.jwt import TokenIssuer
from account_service.kernel.identity.password import PasswordHasher
from account_service.kernel.identity.repository import SqlAlchemyAccountRepository


# Security scheme
security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that yields a session and rolls it back if the request fails.

    Writing routes commit through ``commit()`` before they respond; this
    exit code may run after the response has gone out.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def commit(db: AsyncSession) -> None:
    """Commit the request's unit of work, reporting failure as RepositoryError."""
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise RepositoryError() from e


def get_token_issuer() -> TokenIssuer:
    """Token issuer configured with the process signing key."""
    settings = get_settings()
    return TokenIssuer(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        expire_days=settings.token_expire_days,
    )


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


Issuer = Annotated[TokenIssuer, Depends(get_token_issuer)]
Hasher = Annotated[PasswordHasher, Depends(get_password_hasher)]


async def get_identity_service(db: DbSession, hasher: Hasher, issuer: Issuer) -> IdentityService:
    return IdentityService(
        repository=SqlAlchemyAccountRepository(db),
        hasher=hasher,
        token_issuer=issuer,
    )


Identity = Annotated[IdentityService, Depends(get_identity_service)]


async def get_current_user_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    issuer: Issuer,
) -> uuid.UUID:
    """Verify the bearer token and return the identity it attests to, or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = issuer.decode(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload.user_id


CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]
