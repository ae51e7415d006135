"""
Password hashing and access token helpers.

- bcrypt (cost 10) for password hashes
- HS256 JWTs via python-jose for access tokens
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from chirpy.core.exceptions import HashingError, InvalidTokenError

logger = logging.getLogger(__name__)

TOKEN_ISSUER = "chirpy"
TOKEN_ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = timedelta(seconds=3600)

BCRYPT_ROUNDS = 10
# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8", "surrogatepass")[:BCRYPT_MAX_PASSWORD_BYTES]


def get_password_hash(password: str) -> str:
    """Hash a plaintext password. Every call uses a fresh salt."""
    try:
        hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    except ValueError as exc:
        raise HashingError("Password hashing failed") from exc
    return hashed.decode("ascii")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored hash.

    A stored value that is not a bcrypt hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("ascii"))
    except ValueError:
        return False


# Built at import; every unknown-email login costs exactly one bcrypt check.
_DUMMY_PASSWORD_HASH = get_password_hash(uuid.uuid4().hex)


def verify_password_against_dummy(plain_password: str) -> bool:
    """Spend the same bcrypt work as a real check when there is no user to check against."""
    verify_password(plain_password, _DUMMY_PASSWORD_HASH)
    return False


def _to_timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def create_access_token(
    subject: uuid.UUID | str,
    expires_delta: timedelta,
    secret: str,
    *,
    now: datetime | None = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "iss": TOKEN_ISSUER,
        "sub": str(subject),
        "iat": _to_timestamp(issued_at),
        "exp": _to_timestamp(issued_at + expires_delta),
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str, secret: str) -> uuid.UUID:
    """Return the user id carried by a valid access token.

    Raises InvalidTokenError for a bad signature, an expired token, a foreign
    issuer or a missing / malformed subject alike.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[TOKEN_ALGORITHM],
            issuer=TOKEN_ISSUER,
            options={"require_exp": True, "require_iat": True, "require_sub": True},
        )
    except JWTError as exc:
        logger.debug("Access token rejected: %s", exc)
        raise InvalidTokenError() from exc

    if payload["exp"] <= _to_timestamp(datetime.now(timezone.utc)):
        logger.debug("Access token rejected: expired")
        raise InvalidTokenError()

    try:
        return uuid.UUID(payload["sub"])
    except (TypeError, ValueError, AttributeError) as exc:
        logger.debug("Access token rejected: malformed subject")
        raise InvalidTokenError() from exc
