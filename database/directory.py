"""
SQL-backed user directory.

Each call opens its own session, so concurrent requests never share a
transaction.  ``SQLAlchemyError`` is wrapped in ``DirectoryError``; an
integrity violation on insert means another request registered the same
email first.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.errors import DirectoryError, DuplicateEmailError
from auth.models import Credentials, User
from database.models import User as UserRow

logger = logging.getLogger(__name__)


def _to_pk(user_id: str) -> Optional[int]:
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None


class SqlUserDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def email_exists(self, email: str) -> bool:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(func.count()).select_from(UserRow).where(UserRow.email == email)
                )
                return result.scalar_one() > 0
        except SQLAlchemyError as exc:
            raise DirectoryError(f"email check failed: {exc}") from exc

    async def create(self, name: str, email: str, password_hash: bytes) -> str:
        row = UserRow(name=name, email=email, password_hash=password_hash)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
                    await session.flush()
                    user_id = row.id
        except IntegrityError as exc:
            raise DuplicateEmailError(email) from exc
        except SQLAlchemyError as exc:
            raise DirectoryError(f"failed to create user: {exc}") from exc
        return str(user_id)

    async def lookup_credentials_by_email(self, email: str) -> Optional[Credentials]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(UserRow.id, UserRow.password_hash).where(UserRow.email == email)
                )
                row = result.one_or_none()
        except SQLAlchemyError as exc:
            raise DirectoryError(f"failed to retrieve user by email: {exc}") from exc
        if row is None:
            return None
        return Credentials(id=str(row.id), password_hash=bytes(row.password_hash))

    async def get_by_id(self, user_id: str) -> Optional[User]:
        pk = _to_pk(user_id)
        if pk is None:
            return None
        try:
            async with self._session_factory() as session:
                row = await session.get(UserRow, pk)
        except SQLAlchemyError as exc:
            raise DirectoryError(f"failed to retrieve user by id: {exc}") from exc
        if row is None:
            return None
        return User(id=str(row.id), name=row.name, email=row.email)
