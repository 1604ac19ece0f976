"""
api/routes/v1/users.py -- User management and job application routes.

Routes:
  POST   /users                            -- create user, possibly admin (admin)
  GET    /users                            -- list users (admin)
  GET    /users/{username}                 -- user detail + applied job ids (self or admin)
  PATCH  /users/{username}                 -- update name/email/password (self or admin)
  DELETE /users/{username}                 -- delete account (self or admin)
  POST   /users/{username}/jobs/{job_id}   -- apply to a job (self or admin)

Auth policy:
  require_self_or_admin reads the {username} path parameter, so a regular
  user can only reach their own record while admins can reach any record.

Privilege boundary:
  POST /users is the only way to create an admin. UserUpdate has no isAdmin
  field, so neither a user nor an admin can flip the flag through PATCH.
"""

from fastapi import APIRouter, Depends, Request

from api.models import (
    AppliedResponse,
    DeletedResponse,
    UserCreate,
    UserDetail,
    UserDetailResponse,
    UserListResponse,
    UserOut,
    UserTokenResponse,
    UserUpdate,
)
from auth.dependencies import require_admin, require_self_or_admin
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_token

router = APIRouter()


@router.post("/users", response_model=UserTokenResponse, status_code=201, dependencies=[Depends(require_admin)])
def create_user(request: Request, body: UserCreate) -> UserTokenResponse:
    """Add a user on someone's behalf and return a token for the new account.

    This is not the signup endpoint (see POST /auth/register); it exists so
    admins can provision accounts, including other admins.
    """
    user_store: UserStore = request.app.state.user_store
    user = user_store.register(
        User(
            username=body.username,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            is_admin=body.is_admin,
        ),
        body.password,
    )
    token = create_token(user, request.app.state.settings.secret_key)
    return UserTokenResponse(user=UserOut.from_domain(user), token=token)


@router.get("/users", response_model=UserListResponse, dependencies=[Depends(require_admin)])
def list_users(request: Request) -> UserListResponse:
    user_store: UserStore = request.app.state.user_store
    return UserListResponse(users=[UserOut.from_domain(u) for u in user_store.find_all()])


@router.get("/users/{username}", response_model=UserDetailResponse, dependencies=[Depends(require_self_or_admin)])
def get_user(request: Request, username: str) -> UserDetailResponse:
    user_store: UserStore = request.app.state.user_store
    return UserDetailResponse(user=UserDetail.from_domain(user_store.get(username)))


@router.patch("/users/{username}", response_model=UserDetailResponse, dependencies=[Depends(require_self_or_admin)])
def update_user(request: Request, username: str, body: UserUpdate) -> UserDetailResponse:
    """Update firstName, lastName, email or password. Omitted keys are left alone."""
    user_store: UserStore = request.app.state.user_store
    data = body.model_dump(by_alias=True, exclude_unset=True)
    return UserDetailResponse(user=UserDetail.from_domain(user_store.update(username, data)))


@router.delete("/users/{username}", response_model=DeletedResponse, dependencies=[Depends(require_self_or_admin)])
def delete_user(request: Request, username: str) -> DeletedResponse:
    user_store: UserStore = request.app.state.user_store
    user_store.remove(username)
    return DeletedResponse(deleted=username)


@router.post(
    "/users/{username}/jobs/{job_id}",
    response_model=AppliedResponse,
    dependencies=[Depends(require_self_or_admin)],
)
def apply_to_job(request: Request, username: str, job_id: int) -> AppliedResponse:
    """Record an application from username to job_id."""
    user_store: UserStore = request.app.state.user_store
    return AppliedResponse(applied=user_store.apply_to_job(username, job_id))
