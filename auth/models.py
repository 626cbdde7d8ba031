"""Domain records exchanged with the user directory."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel


class User(BaseModel):
    """Public view of an account; the password hash is deliberately absent."""

    id: str
    name: str
    email: str


@dataclass(frozen=True)
class Credentials:
    id: str
    password_hash: bytes
