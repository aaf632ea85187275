from __future__ import annotations

import datetime as dt
import hashlib
import secrets

import bcrypt
import jwt

from realtor.config import access_token_minutes, bcrypt_rounds, jwt_secret, reset_token_minutes
from realtor.errors import ServerMisconfigured

ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes (and newer releases refuse longer input).
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    # bcrypt stores algorithm + cost + salt in the resulting hash string.
    salt = bcrypt.gensalt(rounds=bcrypt_rounds())
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), (password_hash or "").encode("utf-8"))
    except ValueError:
        # Invalid hash format.
        return False


def _signing_secret() -> str:
    secret = jwt_secret()
    if not secret:
        raise ServerMisconfigured("Server configuration error: JWT secret not set.")
    return secret


def create_access_token(*, user_id: int, email: str, name: str, role: str, phone: str = "") -> str:
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + dt.timedelta(minutes=access_token_minutes())).timestamp()),
    }
    if phone:
        payload["phone"] = phone
    return jwt.encode(payload, _signing_secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Raises `jwt.InvalidTokenError` (incl. expiry) for bad tokens and
    `ServerMisconfigured` when no secret is configured.
    """
    return jwt.decode(token, _signing_secret(), algorithms=[ALGORITHM], options={"require": ["sub", "exp"]})


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def new_reset_token() -> tuple[str, str, dt.datetime]:
    """
    Returns `(raw_token, token_hash, expires_at)`.

    Only the hash is persisted; the raw token goes to the user.
    """
    raw = secrets.token_hex(32)
    expires = dt.datetime.now(dt.timezone.utc) + dt.timedelta(minutes=reset_token_minutes())
    return raw, hash_reset_token(raw), expires
