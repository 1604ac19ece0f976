"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry username, isAdmin, iat and exp.
       Verification returns None on any failure -- the authentication
       middleware treats that as "no identity", and guards turn a missing
       identity into Unauthorized.

  Secret: every sign/verify call takes the secret as an argument. Callers get
       it from the Settings object resolved at startup (app.state.settings);
       this module keeps no key of its own.

  Passwords: bcrypt directly, with the work factor passed in by the caller
       (Settings.bcrypt_work_factor). _dummy_hash() enables timing equalization
       in authenticate_user() so response time does not reveal whether a
       username exists.

Layer rule: no imports from api/ or board/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import Identity, User
from core.config import get_settings

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("jobboard.auth")

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = 12) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Passwords longer than 72 bytes are truncated by bcrypt. The API layer caps
    passwords at 20 characters, well below that threshold.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    """Timing equalization hash, computed once per work factor.

    Must share the real hashes' cost factor or the unknown-user path would
    answer measurably faster than the wrong-password path.
    """
    return hash_password("jobboard_timing_dummy", rounds=rounds)


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_token(user: User | Identity, secret: str, expire_seconds: int = 0) -> str:
    """Sign a credential carrying the user's identity claims.

    Args:
        user:           Any object with username and is_admin.
        secret:         Signing key (Settings.secret_key).
        expire_seconds: Lifetime in seconds. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else get_settings().token_expire_seconds
    now = datetime.now(timezone.utc)
    payload = {
        "username": user.username,
        "isAdmin": bool(user.is_admin),
        "iat": int(now.timestamp()),
        "exp": now + timedelta(seconds=duration),
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def decode_token(token: str, secret: str) -> Identity | None:
    """Verify a credential and return its Identity, or None on any failure.

    Bad signature, expired token, garbage input and missing claims all map
    to None. Nothing here raises.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM])
    except JWTError as exc:
        logger.debug("Rejected credential: %s", exc)
        return None
    username = payload.get("username")
    if not isinstance(username, str) or not username:
        return None
    return Identity(
        username=username,
        is_admin=payload.get("isAdmin") is True,
        issued_at=payload.get("iat"),
    )


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, username: str, password: str, rounds: int = 12) -> User | None:
    """Authenticate a username/password login with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against a dummy hash of the same cost
    - Wrong password: bcrypt runs against the real hash

    Returns the User on success, None on any failure.
    """
    user = store.get_by_username(username)
    if user is None or user.hashed_password is None:
        verify_password(password, _dummy_hash(rounds))
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
