"""Session token creation and verification.

Learn: Sessions are stateless JWTs. The token carries the user id and
role, so checking a session is pure: signature + expiry, no database
lookup. The expiry window (default 7 days) bounds how long a stolen
token stays useful.

verify_session() is total: whatever it is handed (garbage, a token
signed with another key, a refresh-style token, None) it either returns
a CurrentIdentity or raises InvalidToken / ExpiredToken.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from coursehub.auth.identity import CurrentIdentity
from coursehub.config import settings
from coursehub.db.models import Role
from coursehub.errors import ExpiredToken, InvalidToken

TOKEN_TYPE = "session"


def create_session_token(
    user_id: uuid.UUID,
    role: Role,
    now: Optional[datetime] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Mint a signed session token for (user_id, role)."""
    issued = now or datetime.now(timezone.utc)
    if expires_minutes is None:
        expires_minutes = settings.session_expire_minutes
    expires = issued + timedelta(minutes=expires_minutes)
    payload = {
        "sub": str(user_id),
        "role": Role(role).value,
        "type": TOKEN_TYPE,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_session(token, now: Optional[datetime] = None) -> CurrentIdentity:
    """Verify a session token and return the identity it carries.

    Expiry is compared against `now` (defaults to the current time) so the
    boundary is testable: a token is expired once now >= exp.
    """
    if not isinstance(token, str) or not token:
        raise InvalidToken("Missing session token")

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "require": ["sub", "exp", "iat"],
            },
        )
    except jwt.InvalidTokenError as e:
        raise InvalidToken(f"Invalid token: {e}")

    if payload.get("type") != TOKEN_TYPE:
        raise InvalidToken("Not a session token")

    exp = payload["exp"]
    if not isinstance(exp, (int, float)):
        raise InvalidToken("Invalid token: malformed expiry")
    current = (now or datetime.now(timezone.utc)).timestamp()
    if current >= exp:
        raise ExpiredToken()

    try:
        user_id = uuid.UUID(str(payload["sub"]))
        role = Role(payload.get("role"))
    except ValueError:
        raise InvalidToken("Invalid token: malformed claims")

    return CurrentIdentity(user_id=user_id, role=role)
