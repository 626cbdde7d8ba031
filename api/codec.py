"""
JSON envelope encoding and exception → response mapping.

Every non-2xx response leaves the service as ``{"error": <string | map>}``
with a matching status code.  Handlers are registered once on the app, so
each request produces exactly one response no matter where it fails.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth.errors import AuthError, InternalError, ValidationError

logger = logging.getLogger(__name__)

DECODE_FAILURE = "failed to decode json"

# field validators in auth.routes raise these custom error types; their
# message is already the client-facing problem string
_FIELD_PROBLEM_TYPES = {"empty", "invalid", "invalid_email", "too_long"}


def encode_response(status_code: int, body: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body)


def error_response(status_code: int, error: Union[str, Dict[str, str]]) -> JSONResponse:
    return encode_response(status_code, {"error": error})


def problems_from_validation(exc: RequestValidationError) -> Optional[Dict[str, str]]:
    """
    Collapse pydantic errors into a ``{field: problem}`` map.

    Returns ``None`` when the body itself could not be decoded (bad JSON,
    not an object), which is reported as a single string instead.
    """
    problems: Dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        if err.get("type") == "json_invalid" or len(loc) < 2 or loc[0] != "body":
            return None
        field = str(loc[1])
        if err.get("type") in _FIELD_PROBLEM_TYPES:
            problems.setdefault(field, err.get("msg", "invalid"))
        else:
            problems.setdefault(field, "invalid")
    return problems or None


async def _auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(problems_from_validation(exc) or DECODE_FAILURE)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, error.message)
    return error_response(error.status_code, error.message)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail).lower()},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(InternalError.status_code, InternalError.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, _auth_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
