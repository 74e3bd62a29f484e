"""Session issuer — email/password in, session token out.

Learn: Login fails with the same InvalidCredentials whether the email
is unknown or the password is wrong, and both paths pay for one bcrypt
check, so neither the response nor its timing tells an attacker which
accounts exist.
"""

from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.auth.jwt import create_session_token
from coursehub.auth.password import burn_verification, verify_password
from coursehub.db.models import User
from coursehub.errors import InvalidCredentials
from coursehub.services.credential_store import CredentialStore

logger = structlog.get_logger()


class SessionIssuer:
    """Verify credentials and mint session tokens."""

    def __init__(self, db: AsyncSession):
        self.credentials = CredentialStore(db)

    async def issue_session(
        self, email: str, password: str, now: Optional[datetime] = None
    ) -> tuple[User, str]:
        user = await self.credentials.get_by_email(email)
        if user is None:
            burn_verification(password)
            logger.info("session.rejected")
            raise InvalidCredentials()

        if not verify_password(password, user.password_hash):
            logger.info("session.rejected")
            raise InvalidCredentials()

        token = create_session_token(user.id, user.role, now=now)
        logger.info("session.issued", user_id=str(user.id), role=user.role.value)
        return user, token

    def token_for(self, user: User) -> str:
        """Session token for an account that was just created."""
        return create_session_token(user.id, user.role)
