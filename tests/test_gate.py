"""Unit tests for auth/dependencies.py -- request authentication and route guards.

Covers:
- authenticate() stores the Identity for a valid bearer credential
- no header, wrong scheme, wrong secret and expired credentials leave no identity
- require_logged_in / require_admin / require_self_or_admin allow and deny
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from starlette.requests import Request

from auth.dependencies import (
    authenticate,
    current_identity,
    require_admin,
    require_logged_in,
    require_self_or_admin,
)
from auth.models import Identity, User
from auth.tokens import create_token
from core.errors import Unauthorized

SECRET = "k" * 32


def _request(headers: dict[str, str] | None = None, identity: Identity | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": "/",
        "query_string": b"",
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or {}).items()],
    }
    request = Request(scope)
    if identity is not None:
        request.state.user = identity
    return request


def _token(username: str = "test", is_admin: bool = False, secret: str = SECRET) -> str:
    user = User(username=username, first_name="T", last_name="U", email="t@example.com", is_admin=is_admin)
    return create_token(user, secret)


# ---------------------------------------------------------------------------
# authenticate
# ---------------------------------------------------------------------------


class TestAuthenticate:
    def test_valid_header(self):
        request = _request({"Authorization": f"Bearer {_token()}"})
        authenticate(request, SECRET)
        identity = current_identity(request)
        assert identity is not None
        assert identity.username == "test"
        assert identity.is_admin is False

    def test_no_header(self):
        request = _request()
        authenticate(request, SECRET)
        assert current_identity(request) is None

    def test_wrong_scheme(self):
        request = _request({"Authorization": f"Token {_token()}"})
        authenticate(request, SECRET)
        assert current_identity(request) is None

    def test_empty_bearer(self):
        request = _request({"Authorization": "Bearer    "})
        authenticate(request, SECRET)
        assert current_identity(request) is None

    def test_wrong_secret(self):
        request = _request({"Authorization": f"Bearer {_token(secret='w' * 32)}"})
        authenticate(request, SECRET)
        assert current_identity(request) is None

    def test_expired(self):
        past = datetime.now(timezone.utc) - timedelta(days=2)
        token = jwt.encode({"username": "test", "isAdmin": True, "exp": past}, SECRET, algorithm="HS256")
        request = _request({"Authorization": f"Bearer {token}"})
        authenticate(request, SECRET)
        assert current_identity(request) is None

    def test_resets_stale_identity(self):
        request = _request(identity=Identity(username="stale", is_admin=True))
        authenticate(request, SECRET)
        assert current_identity(request) is None


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


class TestRequireLoggedIn:
    def test_allows_identity(self):
        identity = Identity(username="test")
        assert require_logged_in(_request(identity=identity)) == identity

    def test_denies_anonymous(self):
        with pytest.raises(Unauthorized):
            require_logged_in(_request())


class TestRequireAdmin:
    def test_allows_admin(self):
        assert require_admin(_request(identity=Identity(username="a", is_admin=True))).is_admin

    def test_denies_non_admin(self):
        with pytest.raises(Unauthorized):
            require_admin(_request(identity=Identity(username="u", is_admin=False)))

    def test_denies_anonymous(self):
        with pytest.raises(Unauthorized):
            require_admin(_request())


class TestRequireSelfOrAdmin:
    def test_allows_admin_on_other_user(self):
        identity = Identity(username="admin", is_admin=True)
        assert require_self_or_admin(_request(identity=identity), "test") == identity

    def test_allows_same_user(self):
        identity = Identity(username="test")
        assert require_self_or_admin(_request(identity=identity), "test") == identity

    def test_denies_other_user(self):
        with pytest.raises(Unauthorized):
            require_self_or_admin(_request(identity=Identity(username="wrong")), "test")

    def test_denies_anonymous(self):
        with pytest.raises(Unauthorized):
            require_self_or_admin(_request(), "test")
