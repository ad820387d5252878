"""Security helpers (password hashing and signed session tokens)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72
TOKEN_ALGORITHM = "HS256"


class TokenError(Exception):
    """Raised when a session token is missing, malformed, forged or expired."""


def hash_password(password: str) -> str:
    return _ph.hash(password)


def _is_bcrypt(stored: str) -> bool:
    return stored.startswith(_BCRYPT_PREFIXES)


def verify_password(password: str, stored_hash: str | None) -> bool:
    """Check ``password`` against an argon2 hash or a legacy bcrypt hash."""
    stored = stored_hash or ""
    if not stored:
        return False
    if _is_bcrypt(stored):
        # $2y$ is the same algorithm as $2b$
        if stored.startswith("$2y$"):
            stored = "$2b$" + stored[4:]
        try:
            return bcrypt.checkpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], stored.encode("ascii"))
        except (ValueError, UnicodeEncodeError):
            return False
    try:
        return _ph.verify(stored, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def needs_rehash(stored_hash: str) -> bool:
    """True for legacy bcrypt hashes and argon2 hashes with outdated parameters."""
    if _is_bcrypt(stored_hash):
        return True
    try:
        return _ph.check_needs_rehash(stored_hash)
    except argon_exc.InvalidHashError:
        return True


def create_token(user_id: str | int, secret: str, ttl_seconds: int) -> str:
    """Sign a token carrying the user id, valid for ``ttl_seconds``."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "iat": now,
        "exp": now + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def decode_token(token: str, secret: str) -> str | int:
    """Return the user id embedded in ``token``."""
    try:
        payload = jwt.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid token.") from exc
    user_id = payload.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, (str, int)) or user_id == "":
        raise TokenError("Invalid token.")
    return user_id
