"""
API routes.
"""

from fastapi import APIRouter

from account_service.api.v1 import users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["Users"])
