"""
api/limiter.py -- Shared slowapi rate limiter instance.

api/main.py mounts it as middleware; api/routes/v1/auth.py applies the login
limit with @limiter.limit(). One shared instance means one in-memory counter
store -- separate instances per module would never trip a limit.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def login_rate_limit() -> str:
    """Login limit read from Settings at request time (e.g. "10/minute")."""
    return get_settings().login_rate_limit
