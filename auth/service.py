"""
Account flows — register, login, own-profile lookup.

Every collaborator failure is caught here, logged with its real cause, and
re-raised as exactly one ``AuthError`` subclass so that nothing internal
leaks into the response body.
"""

from __future__ import annotations

import logging
from typing import Tuple

from auth.directory import UserDirectory
from auth.errors import (
    DirectoryError,
    DuplicateEmailError,
    EmailInUseError,
    HashingError,
    InternalError,
    InvalidCredentialsError,
    MalformedHashError,
    TokenError,
    UnauthenticatedError,
    UserNotFoundError,
)
from auth.jwt import TokenService
from auth.models import User
from auth.password import PasswordHasher

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        *,
        directory: UserDirectory,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self.directory = directory
        self.hasher = hasher
        self.tokens = tokens

    async def register(self, name: str, email: str, password: str) -> str:
        """Create an account and return its id."""
        try:
            exists = await self.directory.email_exists(email)
        except DirectoryError:
            logger.exception("Email check failed")
            raise InternalError()
        if exists:
            logger.info("Register rejected, email already in use")
            raise EmailInUseError()

        try:
            password_hash = await self.hasher.hash_async(password)
        except HashingError:
            logger.exception("Password hashing failed")
            raise InternalError()

        try:
            user_id = await self.directory.create(name, email, password_hash)
        except DuplicateEmailError:
            logger.info("Register lost a race on a duplicate email")
            raise EmailInUseError()
        except DirectoryError:
            logger.exception("Failed to create user")
            raise InternalError()

        logger.info("Registered user %s", user_id)
        return user_id

    async def login(self, email: str, password: str) -> Tuple[str, str]:
        """Check credentials and return ``(user_id, token)``."""
        try:
            creds = await self.directory.lookup_credentials_by_email(email)
        except DirectoryError:
            logger.exception("Credential lookup failed")
            raise InternalError()
        if creds is None:
            await self.hasher.verify_async(self.hasher.dummy_hash, password)
            raise InvalidCredentialsError()

        try:
            ok = await self.hasher.verify_async(creds.password_hash, password)
        except MalformedHashError:
            logger.exception("Stored hash for user %s is malformed", creds.id)
            raise InternalError()
        if not ok:
            raise InvalidCredentialsError()

        try:
            token = self.tokens.issue(creds.id)
        except TokenError:
            logger.exception("Failed to issue token for user %s", creds.id)
            raise InternalError()

        logger.info("Login: %s", creds.id)
        return creds.id, token

    async def get_own_profile(self, path_id: str, subject: str) -> User:
        """Return the profile for ``path_id`` if it belongs to ``subject``."""
        if path_id != subject:
            logger.info("Subject %s asked for profile %s", subject, path_id)
            raise UnauthenticatedError()

        try:
            user = await self.directory.get_by_id(path_id)
        except DirectoryError:
            logger.exception("Failed to load user %s", path_id)
            raise InternalError()
        if user is None:
            raise UserNotFoundError()
        return user
