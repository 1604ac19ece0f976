"""
api/routes/v1/auth.py -- Credential issuance endpoints.

Routes:
  POST /api/v1/auth/token     -- username/password login; returns a signed token
  POST /api/v1/auth/register  -- self-service signup; returns a signed token

Both routes are public. Tokens carry username and isAdmin; every later
request presents one as "Authorization: Bearer <token>" and the
authentication middleware in api/main.py turns it into request.state.user.

Security:
  POST /token is rate-limited per client IP (Settings.login_rate_limit).
  authenticate_user() provides timing equalization -- use it, never inline.
  Wrong username and wrong password produce the same error.
  Self-registered accounts are never admins; see POST /users for that.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import LoginRequest, RegisterRequest, TokenResponse
from auth.models import User
from auth.store import UserStore
from auth.tokens import authenticate_user, create_token
from core.errors import Unauthorized

logger = logging.getLogger("jobboard.api")

router = APIRouter()


@router.post("/auth/token", response_model=TokenResponse)
@limiter.limit(login_rate_limit)  # must sit BELOW @router so the registered endpoint is the limited one
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange a username and password for a signed token."""
    settings = request.app.state.settings
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.username, body.password, rounds=settings.bcrypt_work_factor)
    if user is None:
        logger.info("Failed login for %s", body.username[:25])
        raise Unauthorized("Invalid username/password")

    token = create_token(user, settings.secret_key)
    resp = JSONResponse(content=TokenResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> TokenResponse:
    """Create a regular (non-admin) account and return a token for it."""
    settings = request.app.state.settings
    user_store: UserStore = request.app.state.user_store
    user = user_store.register(
        User(
            username=body.username,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            is_admin=False,
        ),
        body.password,
    )
    return TokenResponse(token=create_token(user, settings.secret_key))
