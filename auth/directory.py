"""
User directory contract.

The flows only talk to this protocol, so the storage engine can be swapped
(``database.directory.SqlUserDirectory`` in production, an in-memory fake in
tests).  Implementations raise ``DirectoryError`` on infrastructure failure
and ``DuplicateEmailError`` when ``create`` loses a uniqueness race.
"""

from __future__ import annotations

from typing import Optional, Protocol

from auth.models import Credentials, User


class UserDirectory(Protocol):
    async def email_exists(self, email: str) -> bool: ...

    async def create(self, name: str, email: str, password_hash: bytes) -> str: ...

    async def lookup_credentials_by_email(self, email: str) -> Optional[Credentials]: ...

    async def get_by_id(self, user_id: str) -> Optional[User]: ...
