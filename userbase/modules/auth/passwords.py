"""Password hashing with bcrypt."""

import asyncio

import bcrypt

DEFAULT_SALT_ROUNDS = 10

# bcrypt's own accepted work factor range
MIN_SALT_ROUNDS = 4
MAX_SALT_ROUNDS = 31


class PasswordHasher:
    """
    Salted, adaptive password hashing.

    bcrypt compares digests in constant time. The async variants run the
    hash in a worker thread so the event loop is never blocked.
    """

    def __init__(self, rounds: int = DEFAULT_SALT_ROUNDS):
        """
        Args:
            rounds: bcrypt work factor (log2 of iterations)
        """
        if not MIN_SALT_ROUNDS <= rounds <= MAX_SALT_ROUNDS:
            raise ValueError(
                f"bcrypt rounds must be between {MIN_SALT_ROUNDS} and {MAX_SALT_ROUNDS}, got {rounds}"
            )
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            # Malformed hash or oversized password
            return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)
