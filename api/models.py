"""
API request and response models for Jobboard REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
board/models.py, which own the internal domain representation. Route handlers
map between the two via the from_domain() factories below.

Wire format is camelCase (numEmployees, companyHandle, isAdmin). Python code
uses snake_case field names; the alias generator bridges the two.
"""

from typing import Any, Optional, Union

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from auth.models import User
from board.models import Company, Job
from core.errors import BadRequest

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

HANDLE_PATTERN = r"^[a-z0-9-]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
URL_PATTERN = r"^https?://\S+$"


class _ApiModel(BaseModel):
    """Base for all camelCase request/response bodies."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _RequestBody(_ApiModel):
    """Base for request bodies: unknown keys are a 400, not silently ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


def _reject_null(value: Any) -> Any:
    """Refuse an explicit null for a column that cannot be NULL.

    Used by PATCH bodies: pydantic never validates defaults, so an omitted
    field still passes while {"name": null} is a 400.
    """
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


class _SearchQuery(BaseModel):
    """Base for query-string filters.

    extra="allow" lets unknown keys through validation so the clause builder
    rejects them with a BadRequest naming the offending key. populate_by_name
    is off: only the camelCase spelling is a recognized filter.
    """

    model_config = ConfigDict(alias_generator=to_camel, extra="allow", str_strip_whitespace=True)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(_RequestBody):
    """Request body for POST /api/v1/auth/token."""

    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=1, max_length=20)


class RegisterRequest(_RequestBody):
    """Request body for POST /api/v1/auth/register.

    There is no isAdmin field: self-registered accounts are never admins.
    """

    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=5, max_length=20)
    first_name: str = Field(min_length=1, max_length=30)
    last_name: str = Field(min_length=1, max_length=30)
    email: str = Field(min_length=6, max_length=60, pattern=EMAIL_PATTERN)


class TokenResponse(_ApiModel):
    token: str


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------


class CompanyCreate(_RequestBody):
    """Request body for POST /api/v1/companies."""

    handle: str = Field(min_length=1, max_length=25, pattern=HANDLE_PATTERN)
    name: str = Field(min_length=1)
    description: str
    num_employees: Optional[int] = Field(default=None, ge=0)
    logo_url: Optional[str] = Field(default=None, pattern=URL_PATTERN)


class CompanyUpdate(_RequestBody):
    """Request body for PATCH /api/v1/companies/{handle}.

    Every field is optional; explicit nulls clear numEmployees / logoUrl.
    Routes dump with exclude_unset=True so omitted keys are left untouched.
    """

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    num_employees: Optional[int] = Field(default=None, ge=0)
    logo_url: Optional[str] = Field(default=None, pattern=URL_PATTERN)

    @field_validator("name", "description", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        return _reject_null(value)


class CompanySearch(_SearchQuery):
    """Query string for GET /api/v1/companies."""

    name: Optional[str] = Field(default=None, min_length=1)
    min_employees: Optional[int] = Field(default=None, ge=0)
    max_employees: Optional[int] = Field(default=None, ge=0)


class CompanyOut(_ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    handle: str
    name: str
    description: str
    num_employees: Optional[int]
    logo_url: Optional[str]

    @classmethod
    def from_domain(cls, company: Company) -> "CompanyOut":
        return cls(
            handle=company.handle,
            name=company.name,
            description=company.description,
            num_employees=company.num_employees,
            logo_url=company.logo_url,
        )


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class JobCreate(_RequestBody):
    """Request body for POST /api/v1/jobs."""

    title: str = Field(min_length=1)
    salary: Optional[int] = Field(default=None, ge=0)
    equity: Optional[float] = Field(default=None, ge=0, le=1)
    company_handle: str = Field(min_length=1, max_length=25)


class JobUpdate(_RequestBody):
    """Request body for PATCH /api/v1/jobs/{id}. companyHandle cannot change."""

    title: Optional[str] = Field(default=None, min_length=1)
    salary: Optional[int] = Field(default=None, ge=0)
    equity: Optional[float] = Field(default=None, ge=0, le=1)

    @field_validator("title", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        return _reject_null(value)


class JobSearch(_SearchQuery):
    """Query string for GET /api/v1/jobs."""

    title: Optional[str] = Field(default=None, min_length=1)
    min_salary: Optional[int] = Field(default=None, ge=0)
    has_equity: Optional[bool] = None


class JobOut(_ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    title: str
    salary: Optional[int]
    equity: Optional[float]
    company_handle: str

    @classmethod
    def from_domain(cls, job: Job) -> "JobOut":
        return cls(
            id=job.id,
            title=job.title,
            salary=job.salary,
            equity=job.equity,
            company_handle=job.company_handle,
        )


class JobDetail(JobOut):
    """A job together with the company that posted it."""

    company: CompanyOut

    @classmethod
    def from_domain(cls, job: Job) -> "JobDetail":
        return cls(
            id=job.id,
            title=job.title,
            salary=job.salary,
            equity=job.equity,
            company_handle=job.company_handle,
            company=CompanyOut.from_domain(job.company),
        )


class CompanyDetail(CompanyOut):
    """A company together with its open jobs."""

    jobs: list[JobOut] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, company: Company) -> "CompanyDetail":
        return cls(
            handle=company.handle,
            name=company.name,
            description=company.description,
            num_employees=company.num_employees,
            logo_url=company.logo_url,
            jobs=[JobOut.from_domain(j) for j in company.jobs],
        )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCreate(RegisterRequest):
    """Request body for POST /api/v1/users (admin only); may create admins."""

    is_admin: bool = False


class UserUpdate(_RequestBody):
    """Request body for PATCH /api/v1/users/{username}.

    isAdmin is absent, and extra="forbid" turns an attempt to
    send it into a 400.
    """

    password: Optional[str] = Field(default=None, min_length=5, max_length=20)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=30)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=30)
    email: Optional[str] = Field(default=None, min_length=6, max_length=60, pattern=EMAIL_PATTERN)

    @field_validator("password", "first_name", "last_name", "email", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        return _reject_null(value)


class UserOut(_ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    username: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool

    @classmethod
    def from_domain(cls, user: User) -> "UserOut":
        return cls(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_admin=user.is_admin,
        )


class UserDetail(UserOut):
    """A user plus the ids of the jobs they applied to."""

    jobs: list[int] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, user: User) -> "UserDetail":
        return cls(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_admin=user.is_admin,
            jobs=list(user.jobs),
        )


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class CompanyResponse(_ApiModel):
    company: CompanyOut


class CompanyDetailResponse(_ApiModel):
    company: CompanyDetail


class CompanyListResponse(_ApiModel):
    companies: list[CompanyOut]


class JobResponse(_ApiModel):
    job: JobOut


class JobDetailResponse(_ApiModel):
    job: JobDetail


class JobListResponse(_ApiModel):
    jobs: list[JobOut]


class UserDetailResponse(_ApiModel):
    user: UserDetail


class UserListResponse(_ApiModel):
    users: list[UserOut]


class UserTokenResponse(_ApiModel):
    user: UserOut
    token: str


class DeletedResponse(_ApiModel):
    deleted: Union[int, str]


class AppliedResponse(_ApiModel):
    applied: int


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Query-string filters
# ---------------------------------------------------------------------------


def parse_filters(request: Request, model: type[_SearchQuery]) -> dict[str, Any]:
    """Validate the query string against model and return the filters in request order.

    The clause builder numbers placeholders in mapping order, so the result
    follows the order the client sent the parameters rather than the model's
    field order. Unknown keys are kept for the builder to reject.
    """
    try:
        search = model.model_validate(dict(request.query_params))
    except ValidationError as exc:
        raise BadRequest("Invalid search filters.", detail=str(exc.errors())) from exc
    data = search.model_dump(by_alias=True, exclude_none=True)
    return {key: data[key] for key in request.query_params if key in data}
