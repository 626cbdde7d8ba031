"""
Error taxonomy for the account flows.

``AuthError`` subclasses are client-facing: each carries the HTTP status
and the public message that ends up in the ``{"error": ...}`` envelope.
The infrastructure errors at the bottom are raised by collaborators
(hasher, token service, directory) and never cross the HTTP boundary
directly; the flows translate them into one of the client-facing classes.
"""

from __future__ import annotations

from typing import Dict, Union

from fastapi import status


class AuthError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "internal server error"

    def __init__(self, message: Union[str, Dict[str, str], None] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(str(self.message))


class ValidationError(AuthError):
    """Client-fixable input problem; ``message`` may be a field → problem map."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "failed to decode json"


class EmailInUseError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "email already in use"


class InvalidCredentialsError(AuthError):
    """Raised for both an unknown email and a wrong password."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "user or password not found"


class UnauthenticatedError(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "unauthorized"


class UserNotFoundError(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "user not found"


class InternalError(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "internal server error"


# ── Infrastructure errors ──────────────────────────────────────────────


class HashingError(Exception):
    """The password hasher could not produce a hash."""


class MalformedHashError(Exception):
    """A stored password hash could not be parsed."""


class TokenError(Exception):
    """A token could not be signed."""


class DirectoryError(Exception):
    """The user directory failed (connection, query, commit)."""


class DuplicateEmailError(DirectoryError):
    """``create`` hit the unique constraint on email."""
