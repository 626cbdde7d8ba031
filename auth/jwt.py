"""
JWT token creation and verification.

Tokens are compact HS256 JWS strings (``header.payload.signature``,
base64url, no padding) carrying ``sub``, ``iat`` and ``exp``.  The secret
is injected at construction (env var: ``JWT_SECRET``); the service refuses
to start without one.

``issue`` returns the token already prefixed with the ``"Bearer: "``
scheme label so clients can drop it straight into an ``Authorization``
header.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Any, Callable, Dict

from auth.errors import TokenError, UnauthenticatedError

logger = logging.getLogger(__name__)

TOKEN_SCHEME = "Bearer: "
_ACCEPTED_PREFIXES = ("Bearer:", "Bearer ")
_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64url(data: bytes) -> str:
    return urlsafe_b64encode(data).rstrip(b"=").decode()


def _unb64url(segment: str) -> bytes:
    return urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def strip_scheme(token_string: str) -> str:
    """Drop surrounding whitespace and the scheme label, if present."""
    token = token_string.strip()
    for prefix in _ACCEPTED_PREFIXES:
        if token.startswith(prefix):
            token = token[len(prefix):]
            break
    return token.strip()


class TokenService:
    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("TokenService requires a non-empty secret (set JWT_SECRET)")
        self._secret = secret.encode()
        self.expiry_seconds = expiry_seconds
        self._clock = clock

    def issue(self, subject: str) -> str:
        """Create a signed token for ``subject``, prefixed with the scheme label."""
        now = int(self._clock())
        claims = {"sub": subject, "iat": now, "exp": now + self.expiry_seconds}
        try:
            return TOKEN_SCHEME + self._sign(claims)
        except (TypeError, ValueError) as exc:
            raise TokenError(f"failed to sign token: {exc}") from exc

    def validate(self, token_string: str) -> str:
        """
        Verify a token and return its ``sub`` claim.

        Raises ``UnauthenticatedError`` for anything short of a well-formed,
        correctly signed, unexpired token.  The reason is logged, never
        returned.
        """
        token = strip_scheme(token_string or "")
        if not token:
            raise UnauthenticatedError()
        try:
            claims = self._verify(token)
        except ValueError as exc:
            logger.debug("Rejected token: %s", exc)
            raise UnauthenticatedError() from exc
        return claims["sub"]

    # ── Helpers ────────────────────────────────────────────────────────

    def _signature(self, signing_input: bytes) -> bytes:
        return hmac.new(self._secret, signing_input, hashlib.sha256).digest()

    def _sign(self, claims: Dict[str, Any]) -> str:
        header_b64 = _b64url(json.dumps(_HEADER, separators=(",", ":")).encode())
        payload_b64 = _b64url(json.dumps(claims, separators=(",", ":")).encode())
        signing_input = f"{header_b64}.{payload_b64}".encode()
        return f"{header_b64}.{payload_b64}.{_b64url(self._signature(signing_input))}"

    def _verify(self, token: str) -> Dict[str, Any]:
        parts = token.split(".")
        if len(parts) != 3:
            raise ValueError("bad format")
        header_b64, payload_b64, sig_b64 = parts
        try:
            signature = _unb64url(sig_b64)
        except ValueError as exc:
            raise ValueError(f"bad encoding: {exc}") from exc
        expected = self._signature(f"{header_b64}.{payload_b64}".encode())
        if not hmac.compare_digest(expected, signature):
            raise ValueError("bad signature")

        try:
            header = json.loads(_unb64url(header_b64))
        except (ValueError, RecursionError) as exc:
            raise ValueError(f"bad header: {type(exc).__name__}") from exc
        if not isinstance(header, dict) or header.get("alg") != "HS256":
            raise ValueError("unsupported algorithm")

        try:
            claims = json.loads(_unb64url(payload_b64))
        except (ValueError, RecursionError) as exc:
            raise ValueError(f"bad payload: {exc}") from exc
        if not isinstance(claims, dict):
            raise ValueError("bad payload")
        exp = claims.get("exp")
        if not isinstance(exp, int) or isinstance(exp, bool):
            raise ValueError("missing exp")
        if self._clock() >= exp:
            raise ValueError("token expired")
        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub:
            raise ValueError("missing sub")
        return claims
