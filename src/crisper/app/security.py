"""
Bearer-token and password helpers.

Tokens are HS256 JWTs carrying the user id under the "userId" claim.
Passwords are stored as salted PBKDF2-SHA256 hashes in the form
``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from crisper.app.config import settings
from crisper.app.errors import UnauthorizedError

_HASH_SCHEME = "pbkdf2_sha256"
_HASH_ITERATIONS = 120_000


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), _HASH_ITERATIONS
    ).hex()
    return f"{_HASH_SCHEME}${_HASH_ITERATIONS}${salt}${digest}"


def verify_password(password: str, stored: str) -> bool:
    """
    Check a plain-text password against a stored hash.

    Args:
        password: The password supplied by the caller.
        stored:   The value from the users.password column.

    Returns:
        bool: True if the password matches.
    """
    try:
        scheme, iterations, salt, digest = stored.split("$", 3)
    except ValueError:
        return False
    if scheme != _HASH_SCHEME:
        return False

    candidate = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), int(iterations)
    ).hex()
    return secrets.compare_digest(candidate, digest)


def create_token(user_id: int) -> str:
    """
    Sign a bearer token for the given user.

    Args:
        user_id: Id of the authenticated user.

    Returns:
        str: The encoded JWT.
    """
    payload = {
        "userId": user_id,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Verify a bearer token and return its payload.

    Raises:
        UnauthorizedError: If the token is missing, malformed, expired or
                           does not carry an integer "userId" claim.
    """
    if not token:
        raise UnauthorizedError()

    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise UnauthorizedError() from exc

    if not isinstance(payload.get("userId"), int):
        raise UnauthorizedError()
    return payload


def bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an Authorization header; a bare token is accepted too."""
    raw = (authorization or "").strip()
    if raw.lower().startswith("bearer "):
        return raw[len("Bearer "):].strip()
    return raw
