"""
Account API routes — register, login, own details.

Route prefix: /user
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_core import PydanticCustomError

from auth.dependencies import get_auth_service, get_current_user_id
from auth.models import User
from auth.password import MAX_PASSWORD_BYTES
from auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["user"])


# ── Request / response schemas ─────────────────────────────────────────


def _not_blank(value: str) -> str:
    if not value.strip():
        raise PydanticCustomError("empty", "empty")
    try:
        value.encode()
    except UnicodeEncodeError:
        raise PydanticCustomError("invalid", "invalid")
    return value


class RegisterRequest(BaseModel):
    model_config = ConfigDict(validate_default=True)

    name: str = ""
    email: str = ""
    password: str = ""

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        _not_blank(v)
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError("invalid_email", "invalid email")
        # stored exactly as given; lookups are case-sensitive
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        _not_blank(v)
        if len(v.encode()) > MAX_PASSWORD_BYTES:
            raise PydanticCustomError("too_long", "too long")
        return v


class RegisterResponse(BaseModel):
    id: str


class LoginRequest(BaseModel):
    model_config = ConfigDict(validate_default=True)

    email: str = ""
    password: str = ""

    @field_validator("email", "password")
    @classmethod
    def check_required(cls, v: str) -> str:
        return _not_blank(v)


class LoginResponse(BaseModel):
    id: str
    token: str


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    req: RegisterRequest,
    svc: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new user."""
    logger.info("Received register")
    user_id = await svc.register(req.name, req.email, req.password)
    return {"id": user_id}


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    svc: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    logger.info("Received login")
    user_id, token = await svc.login(req.email, req.password)
    return {"id": user_id, "token": token}


@router.get("/details/{user_id}", response_model=User)
async def details(
    user_id: str,
    subject: str = Depends(get_current_user_id),
    svc: AuthService = Depends(get_auth_service),
) -> User:
    """Return the caller's own profile."""
    return await svc.get_own_profile(user_id, subject)
