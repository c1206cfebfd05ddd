"""Password hashing and access tokens."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from workforce_engine.config import get_settings
from workforce_engine.errors import AuthenticationError

_HASH_NAME = "sha256"
_ITERATIONS = 260_000


def hash_password(raw: str) -> str:
    """Hash a password as ``pbkdf2_sha256$iterations$salt$digest``."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(_HASH_NAME, raw.encode("utf-8"), salt.encode("utf-8"), _ITERATIONS)
    return f"pbkdf2_{_HASH_NAME}${_ITERATIONS}${salt}${digest.hex()}"


def verify_password(raw: str, password_hash: str) -> bool:
    """Check a password against a stored hash."""
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
        digest = hashlib.pbkdf2_hmac(
            algorithm.removeprefix("pbkdf2_"),
            raw.encode("utf-8"),
            salt.encode("utf-8"),
            int(iterations),
        )
    except ValueError:
        # Malformed hash or unknown digest
        return False
    return hmac.compare_digest(digest.hex(), expected)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Encode a signed JWT carrying ``data`` plus an expiry claim."""
    settings = get_settings()
    to_encode = dict(data)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT, raising AuthenticationError when invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise AuthenticationError("Could not validate credentials")
    if payload.get("sub") is None:
        raise AuthenticationError("Could not validate credentials")
    return payload
