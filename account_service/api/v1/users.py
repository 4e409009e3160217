"""
User account endpoints.
"""

from fastapi import APIRouter, status

from account_service.api.deps import CurrentUserId, DbSession, Identity, commit
from account_service.schemas.auth import (
    TokenResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
    UserUpdateResponse,
)

router = APIRouter()


@router.get("", response_model=UserResponse)
async def get_current_user_profile(user_id: CurrentUserId, identity: Identity):
    """Get the authenticated user's profile."""
    return await identity.get_profile(user_id)


@router.post("", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate, identity: Identity, db: DbSession):
    """
    Register a new user account.

    Returns a bearer token valid for seven days.
    """
    token = await identity.register(
        name=data.name,
        email=data.email,
        password=data.password,
    )
    await commit(db)
    return TokenResponse(token=token)


@router.put("", response_model=UserUpdateResponse)
async def update_account(
    data: UserUpdate,
    user_id: CurrentUserId,
    identity: Identity,
    db: DbSession,
):
    """
    Update the authenticated user's name, email and/or password.

    Changing the password requires the current one in ``old_password``.
    """
    user = await identity.update_account(
        user_id=user_id,
        name=data.name,
        email=data.email,
        old_password=data.old_password,
        new_password=data.new_password,
    )
    await commit(db)
    return UserUpdateResponse(user=user)
