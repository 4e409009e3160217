"""
Kernel Layer

- Identity Core (password hashing, bearer tokens, account flows)
- Data models backing the account repository
"""

from account_service.kernel.models import User

__all__ = [
    "User",
]
