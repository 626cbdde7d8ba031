"""
FastAPI dependencies for authentication.

Provides the service accessors and ``get_current_user_id``, the gate that
sits in front of every identity-scoped route.  The gate only answers
"who are you"; whether that identity may see a resource is decided by the
route itself.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from auth.errors import UnauthenticatedError
from auth.jwt import TokenService
from auth.service import AuthService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_user_id(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """
    Extract and verify the bearer token, returning the authenticated
    subject.  Missing, malformed, forged and expired tokens all produce
    the same 401.
    """
    if authorization is None or not authorization.strip():
        raise UnauthenticatedError()
    return tokens.validate(authorization)
