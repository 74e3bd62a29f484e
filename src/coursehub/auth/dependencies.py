"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to turn the
Authorization header into a CurrentIdentity. Both run the guard's
authorize() chain; ownership needs the stored course, so the registry
checks it. Dependencies resolve before the request body is validated,
so a missing or bad token is always a 401, never a 422 or a 403.
"""

from typing import Optional

from fastapi import Header

from coursehub.auth.guard import authorize
from coursehub.auth.identity import CurrentIdentity
from coursehub.db.models import Role
from coursehub.errors import CoursehubError, to_http_exception


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return None


async def get_current_identity(
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Extract the current identity (required — 401 if absent or invalid)."""
    try:
        return authorize(_bearer_token(authorization))
    except CoursehubError as e:
        raise to_http_exception(e)


def require_role(*roles: Role):
    """Build a dependency that also requires one of `roles` (403 otherwise)."""

    async def dependency(
        authorization: Optional[str] = Header(None),
    ) -> CurrentIdentity:
        try:
            return authorize(_bearer_token(authorization), roles=roles)
        except CoursehubError as e:
            raise to_http_exception(e)

    return dependency


require_instructor = require_role(Role.INSTRUCTOR)
