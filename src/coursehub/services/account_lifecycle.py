"""Account lifecycle — deleting a user and everything hanging off them.

Learn: The cascade is one transaction. Either every step below commits
together or none of them does:

1. the user's own enrollments (as a student) are removed
2. if the user is an instructor: every enrollment on their courses,
   then the courses themselves
3. the user row
4. an account.deleted audit event

A failure at any step rolls the whole unit back and surfaces as
StorageUnavailable; the account is then reported as not deleted and no
half-cleaned course is left behind.
"""

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.models import Course, Enrollment, Role, User
from coursehub.db.store import Store
from coursehub.errors import NotFound
from coursehub.events.store import EventStore
from coursehub.events.types import ACCOUNT_DELETED

logger = structlog.get_logger()


class AccountLifecycle:
    """Cascading account deletion."""

    def __init__(self, db: AsyncSession):
        self.store = Store(db)
        self.events = EventStore(self.store)

    async def delete_account(self, user_id: uuid.UUID) -> None:
        user = await self.store.get(User, user_id, for_update=True)
        if user is None:
            raise NotFound("User not found")
        role = user.role
        log = logger.bind(user_id=str(user_id), role=role.value)

        async with self.store.atomic():
            enrollments_removed = await self.store.delete_where(
                Enrollment, Enrollment.student_id == user_id
            )

            course_ids: list[uuid.UUID] = []
            if role is Role.INSTRUCTOR:
                owned = await self.store.scan(Course, Course.instructor_id == user_id)
                course_ids = [c.id for c in owned]
                if course_ids:
                    enrollments_removed += await self.store.delete_where(
                        Enrollment, Enrollment.course_id.in_(course_ids)
                    )
                    await self.store.delete_where(Course, Course.id.in_(course_ids))

            await self.store.delete_where(User, User.id == user_id)
            await self.events.append(
                stream_id=f"user:{user_id}",
                event_type=ACCOUNT_DELETED,
                data={
                    "role": role.value,
                    "courses_deleted": [str(cid) for cid in course_ids],
                    "enrollments_removed": enrollments_removed,
                },
            )

        log.info(
            "account.deleted",
            courses_deleted=len(course_ids),
            enrollments_removed=enrollments_removed,
        )
