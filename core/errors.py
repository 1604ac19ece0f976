"""
core/errors.py -- Exception hierarchy shared by stores, guards and routes.

Every error carries an HTTP status and a machine-readable code. Stores and
guards raise these; api/main.py renders them into the ErrorResponse envelope.
Nothing below api/ knows about HTTP responses.

Layer rule: core/ is the kernel. No imports from api/, auth/, or board/.
"""

from __future__ import annotations


class JobBoardError(Exception):
    """Base exception for every expected failure in Jobboard."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class BadRequest(JobBoardError):
    """Malformed input: unknown filter keys, bad ranges, empty updates, duplicates."""

    status_code = 400
    code = "bad_request"


class Unauthorized(JobBoardError):
    """A guard denied the request, or a login attempt failed."""

    status_code = 401
    code = "unauthorized"


class NotFound(JobBoardError):
    """The requested company, job or user does not exist."""

    status_code = 404
    code = "not_found"
