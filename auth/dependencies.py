"""
auth/dependencies.py -- Request authentication and FastAPI guard dependencies.

Two stages with different failure modes:

  authenticate() runs on every request (installed as HTTP middleware in
  api/main.py). It reads "Authorization: Bearer <token>", verifies it, and
  stores the resulting Identity on request.state.user. Any failure -- no
  header, wrong scheme, bad signature, expired token -- is silent: the
  request simply proceeds without an identity, because public routes must
  still work.

  The require_* guards run per route via Depends(). Each returns the Identity
  when its predicate holds and raises Unauthorized otherwise, which aborts
  the dependency chain before the handler runs. Guards only look at
  request.state; they never touch the raw credential.

Usage:
    @router.delete("/companies/{handle}")
    async def remove(handle: str, identity: Identity = Depends(require_admin)): ...

Layer rule: no imports from api/ or board/.
  May import from fastapi/starlette (Request) because this module is part of
  the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import Identity
from auth.tokens import decode_token
from core.errors import Unauthorized

logger = logging.getLogger("jobboard.auth")

_BEARER_PREFIX = "Bearer "


def authenticate(request: Request, secret: str) -> None:
    """Attach the caller's Identity to request.state.user if a valid credential is present.

    Never raises. An absent or invalid credential leaves request.state.user
    as None and defers the decision to whichever guard runs next.
    """
    request.state.user = None
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith(_BEARER_PREFIX):
        return
    token = auth_header[len(_BEARER_PREFIX) :].strip()
    if not token:
        return
    identity = decode_token(token, secret)
    if identity is None:
        logger.debug("Ignoring invalid bearer credential on %s", request.url.path)
        return
    request.state.user = identity


def current_identity(request: Request) -> Identity | None:
    """Return the Identity set by authenticate(), or None for anonymous callers."""
    return getattr(request.state, "user", None)


def require_logged_in(request: Request) -> Identity:
    """Allow any authenticated caller."""
    identity = current_identity(request)
    if identity is None:
        raise Unauthorized("Authentication required.")
    return identity


def require_admin(request: Request) -> Identity:
    """Allow only authenticated administrators."""
    identity = current_identity(request)
    if identity is None or not identity.is_admin:
        raise Unauthorized("Admin access required.")
    return identity


def require_self_or_admin(request: Request, username: str) -> Identity:
    """Allow administrators, or the user named by the {username} path parameter.

    FastAPI fills username from the route's path parameter of the same name.
    """
    identity = current_identity(request)
    if identity is None:
        raise Unauthorized("Authentication required.")
    if not identity.is_admin and identity.username != username:
        raise Unauthorized("You may only act on your own account.")
    return identity
