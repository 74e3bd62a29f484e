"""Credential store — user identity records.

Learn: The only place users are created or looked up. Emails are
normalised (strip + lower) on the way in, so "Ann@X.com" and
"ann@x.com" are the same account and the UNIQUE constraint on
users.email catches the race two simultaneous registrations would
otherwise win together.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.auth.password import hash_password
from coursehub.db.models import Role, User
from coursehub.db.store import Store
from coursehub.errors import EmailTaken
from coursehub.events.store import EventStore
from coursehub.events.types import USER_REGISTERED
from coursehub.schemas.user import normalize_email

logger = structlog.get_logger()


class CredentialStore:
    """Create and look up user accounts."""

    def __init__(self, db: AsyncSession):
        self.store = Store(db)
        self.events = EventStore(self.store)

    async def add(self, name: str, email: str, password: str, role: Role) -> User:
        """Register a new account. Raises EmailTaken on a case-insensitive clash."""
        email = normalize_email(email)
        if await self.get_by_email(email):
            raise EmailTaken()

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=Role(role),
        )
        if not await self.store.insert_unique(user):
            # Lost a race with a concurrent registration of the same email.
            raise EmailTaken()

        await self.events.append(
            stream_id=f"user:{user.id}",
            event_type=USER_REGISTERED,
            data={"email": email, "role": user.role.value},
        )
        await self.store.commit()
        logger.info("user.registered", user_id=str(user.id), role=user.role.value)
        return user

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.store.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        users = await self.store.scan(User, User.email == normalize_email(email))
        return users[0] if users else None
