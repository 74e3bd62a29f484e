"""Authorization guard — the checks every mutating operation passes first.

Learn: Three pure predicates, always evaluated in this order and
short-circuiting on the first failure:

1. authenticated — a valid session token       → else Unauthorized (401)
2. role_is       — caller has one of the roles   → else Forbidden (403)
3. owns          — caller is the resource owner  → else Forbidden (403)

None of them touch storage or mutate anything, so they can run before
a write begins and again inside a service as defense in depth.
"""

import uuid
from datetime import datetime
from typing import Iterable, Optional

from coursehub.auth.identity import CurrentIdentity
from coursehub.auth.jwt import verify_session
from coursehub.db.models import Role
from coursehub.errors import Forbidden, Unauthorized

_ROLE_LABELS: dict[Role, str] = {
    Role.INSTRUCTOR: "instructors",
    Role.STUDENT: "students",
}


def authenticated(token: Optional[str], now: Optional[datetime] = None) -> CurrentIdentity:
    """Resolve a bearer token to an identity."""
    if not token:
        raise Unauthorized()
    return verify_session(token, now=now)


def role_is(identity: CurrentIdentity, *roles: Role) -> CurrentIdentity:
    """Require the caller's role to be one of `roles`."""
    if identity.role not in roles:
        allowed = " or ".join(_ROLE_LABELS[r] for r in roles)
        raise Forbidden(f"Only {allowed} can do this")
    return identity


def owns(caller_id: uuid.UUID, owner_id: uuid.UUID) -> None:
    """Require the caller to be the owner of the resource."""
    if caller_id != owner_id:
        raise Forbidden("You do not own this resource")


def authorize(
    token: Optional[str],
    roles: Optional[Iterable[Role]] = None,
    owner_id: Optional[uuid.UUID] = None,
    now: Optional[datetime] = None,
) -> CurrentIdentity:
    """Run the full chain: authenticated → role_is → owns."""
    identity = authenticated(token, now=now)
    if roles is not None:
        role_is(identity, *roles)
    if owner_id is not None:
        owns(identity.user_id, owner_id)
    return identity
