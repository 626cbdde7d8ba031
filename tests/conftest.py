"""
Shared fixtures: an in-memory user directory and a wired test app.
"""

from __future__ import annotations

import asyncio
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from auth.errors import DuplicateEmailError
from auth.jwt import TokenService
from auth.models import Credentials, User
from auth.password import PasswordHasher
from config.settings import Settings
from main import create_app

TEST_SECRET = "test-secret"


class InMemoryUserDirectory:
    """Dict-backed directory with sequential string ids ("1", "2", ...)."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._seq = 1
        self._by_id: Dict[str, dict] = {}
        self._by_email: Dict[str, dict] = {}

    async def email_exists(self, email: str) -> bool:
        return email in self._by_email

    async def create(self, name: str, email: str, password_hash: bytes) -> str:
        async with self._lock:
            if email in self._by_email:
                raise DuplicateEmailError(email)
            user_id = str(self._seq)
            self._seq += 1
            record = {"id": user_id, "name": name, "email": email, "password_hash": password_hash}
            self._by_id[user_id] = record
            self._by_email[email] = record
            return user_id

    async def lookup_credentials_by_email(self, email: str) -> Optional[Credentials]:
        record = self._by_email.get(email)
        if record is None:
            return None
        return Credentials(id=record["id"], password_hash=record["password_hash"])

    async def get_by_id(self, user_id: str) -> Optional[User]:
        record = self._by_id.get(user_id)
        if record is None:
            return None
        return User(id=record["id"], name=record["name"], email=record["email"])

    def count(self) -> int:
        return len(self._by_id)


@pytest.fixture()
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=4)


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture()
def tokens() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture()
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture()
def client(settings: Settings, directory: InMemoryUserDirectory) -> TestClient:
    return TestClient(create_app(settings=settings, directory=directory))
