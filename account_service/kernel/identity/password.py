"""
Password hashing utilities using bcrypt.
"""

import anyio
import bcrypt

from account_service.kernel.identity.exceptions import HashingError

# Number of rounds for bcrypt hashing (12 is secure default)
BCRYPT_ROUNDS = 12


class PasswordHasher:
    """
    Password hashing service.

    Digests are bcrypt strings with the salt and cost factor embedded.
    Callers treat them as opaque and only pass them back to ``verify``.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    @staticmethod
    def _truncate_password(password: str) -> bytes:
        """
        Truncate password to 72 bytes (bcrypt limit) and encode.

        bcrypt only uses the first 72 bytes of a password.
        """
        return password.encode('utf-8')[:72]

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt with a fresh random salt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string

        Raises:
            HashingError: If salt generation or hashing fails
        """
        pwd_bytes = self._truncate_password(password)
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(pwd_bytes, salt)
        except (ValueError, OSError) as e:
            raise HashingError() from e
        return hashed.decode('utf-8')

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        A mismatch, or a stored value that is not a bcrypt hash, is False.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise
        """
        try:
            pwd_bytes = self._truncate_password(plain_password)
            hash_bytes = hashed_password.encode('utf-8')
            return bcrypt.checkpw(pwd_bytes, hash_bytes)
        except (ValueError, TypeError):
            return False

    async def hash_async(self, password: str) -> str:
        """Hash in a worker thread so the event loop keeps serving requests."""
        return await anyio.to_thread.run_sync(self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: str) -> bool:
        """Verify in a worker thread."""
        return await anyio.to_thread.run_sync(self.verify, plain_password, hashed_password)
