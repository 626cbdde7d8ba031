"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.  The async helpers push the
work onto a worker thread so a slow hash never stalls the event loop.
"""

from __future__ import annotations

import asyncio

import bcrypt

from auth.errors import HashingError, MalformedHashError

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = 14) -> None:
        self.rounds = rounds
        # checked against on login for an unknown email
        self.dummy_hash = bcrypt.hashpw(b"unused-password", bcrypt.gensalt(rounds=rounds))

    def hash(self, password: str) -> bytes:
        """Hash a password with bcrypt (fresh salt on every call)."""
        try:
            return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError) as exc:
            raise HashingError(f"bcrypt failed: {exc}") from exc

    def verify(self, password_hash: bytes, password: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        try:
            raw = password.encode()
        except UnicodeEncodeError:
            return False
        if len(raw) > MAX_PASSWORD_BYTES:
            # hash() never accepted such a password, so nothing can match
            return False
        try:
            return bcrypt.checkpw(raw, password_hash)
        except (ValueError, TypeError) as exc:
            raise MalformedHashError(str(exc)) from exc

    async def hash_async(self, password: str) -> bytes:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password_hash: bytes, password: str) -> bool:
        return await asyncio.to_thread(self.verify, password_hash, password)
