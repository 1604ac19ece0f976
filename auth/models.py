"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors board/models.py:
dataclasses own domain shape; stores and routes do the work.

Layer rule: no imports from api/ or board/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Identity:
    """Verified claims about the caller, valid for one request only.

    Built exclusively by auth.tokens.decode_token() from a credential whose
    signature checked out. Stored on request.state.user by the authentication
    middleware and discarded with the request.
    """

    username: str
    is_admin: bool = False
    issued_at: int | None = None  # "iat" claim, seconds since epoch


@dataclass
class User:
    """A registered job seeker or administrator.

    hashed_password is the bcrypt hash and is never serialized to clients.
    jobs holds the ids of jobs the user applied to; it is only populated by
    UserStore.get().
    """

    username: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool = False
    hashed_password: str | None = None
    jobs: list[int] = field(default_factory=list)
