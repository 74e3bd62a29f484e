"""Course registry — the authoritative record of courses and rosters.

Learn: Every write re-checks the rules the HTTP guard already checked
(defense in depth), in the same order: the course must exist
(NotFound), then the caller must own it (Forbidden). Only then is
anything changed.

Enrollment is the one contended operation. The flow is:

    lock course row ─► already on roster? ─► AlreadyEnrolled
                              │ no
                              ▼
                  insert Enrollment (UNIQUE course_id+student_id)
                              │ constraint rejected it?
                              ▼
          course gone ─► NotFound      otherwise ─► AlreadyEnrolled

The UNIQUE constraint makes check-then-insert a single logical step:
of two concurrent enrollments of the same pair, exactly one commits
and the other reports AlreadyEnrolled. The foreign key makes an
enrollment into a concurrently deleted course fail instead of
leaving an orphan row.
"""

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.auth.guard import owns
from coursehub.db.models import Course, Enrollment, Role, User, utcnow
from coursehub.db.store import Store
from coursehub.errors import AlreadyEnrolled, Forbidden, NotFound
from coursehub.events.store import EventStore
from coursehub.events.types import (
    COURSE_CREATED,
    COURSE_DELETED,
    COURSE_UPDATED,
    ENROLLMENT_CREATED,
)
from coursehub.schemas.course import CourseCreate, CourseUpdate

logger = structlog.get_logger()


class CourseRegistry:
    """Business logic for courses and enrollment."""

    def __init__(self, db: AsyncSession):
        self.store = Store(db)
        self.events = EventStore(self.store)

    # ─── Create ──────────────────────────────────────────

    async def create(self, instructor_id: uuid.UUID, fields: CourseCreate) -> Course:
        """Publish a new course owned by `instructor_id`."""
        instructor = await self.store.get(User, instructor_id)
        if instructor is None or instructor.role is not Role.INSTRUCTOR:
            raise Forbidden("Only instructors can create courses")

        data = fields.model_dump(mode="json")
        course = Course(instructor_id=instructor_id, **data)
        await self.store.put(course)

        await self.events.append(
            stream_id=f"course:{course.id}",
            event_type=COURSE_CREATED,
            data={"title": course.title, "instructor_id": str(instructor_id)},
        )
        await self.store.commit()
        logger.info("course.created", course_id=str(course.id), instructor_id=str(instructor_id))
        return await self.get(course.id)

    # ─── Read ────────────────────────────────────────────

    async def list_courses(self) -> list[Course]:
        """All courses in creation order, instructors and rosters loaded."""
        return await self.store.scan(Course, order_by=Course.created_at)

    async def get(self, course_id: uuid.UUID) -> Course:
        course = await self.store.get(Course, course_id)
        if course is None:
            raise NotFound("Course not found")
        return course

    # ─── Update / delete (owner only) ────────────────────

    async def update(
        self,
        course_id: uuid.UUID,
        instructor_id: uuid.UUID,
        changes: CourseUpdate,
    ) -> Course:
        """Apply a partial update. Absent fields are left untouched."""
        course = await self._get_owned(course_id, instructor_id)

        fields = changes.changes()
        for name, value in fields.items():
            setattr(course, name, value)
        course.updated_at = utcnow()
        await self.store.put(course)

        await self.events.append(
            stream_id=f"course:{course_id}",
            event_type=COURSE_UPDATED,
            data={"fields": sorted(fields)},
            metadata={"actor_id": str(instructor_id)},
        )
        await self.store.commit()
        logger.info("course.updated", course_id=str(course_id), fields=sorted(fields))
        return await self.get(course_id)

    async def delete(self, course_id: uuid.UUID, instructor_id: uuid.UUID) -> None:
        """Permanently delete a course and its roster."""
        course = await self._get_owned(course_id, instructor_id)
        title = course.title
        roster_size = len(course.enrollments)

        async with self.store.atomic():
            await self.store.delete_where(Enrollment, Enrollment.course_id == course_id)
            await self.store.delete_where(Course, Course.id == course_id)
            await self.events.append(
                stream_id=f"course:{course_id}",
                event_type=COURSE_DELETED,
                data={"title": title, "roster_size": roster_size},
                metadata={"actor_id": str(instructor_id)},
            )
        logger.info("course.deleted", course_id=str(course_id), roster_size=roster_size)

    async def _get_owned(self, course_id: uuid.UUID, instructor_id: uuid.UUID) -> Course:
        course = await self.store.get(Course, course_id, for_update=True)
        if course is None:
            raise NotFound("Course not found")
        owns(instructor_id, course.instructor_id)
        return course

    # ─── Enrollment ──────────────────────────────────────

    async def enroll(self, course_id: uuid.UUID, student_id: uuid.UUID) -> Course:
        """Add `student_id` to the course roster, exactly once."""
        course = await self.store.get(Course, course_id, for_update=True)
        if course is None:
            raise NotFound("Course not found")
        if await self.store.get(User, student_id) is None:
            raise NotFound("User not found")

        if student_id in course.enrolled_student_ids:
            # Nothing was written; commit just releases the row lock.
            # A rollback would expire objects the caller still holds.
            await self.store.commit()
            raise AlreadyEnrolled()

        inserted = await self.store.insert_unique(
            Enrollment(course_id=course_id, student_id=student_id)
        )
        if not inserted:
            # Either a concurrent enroll of the same pair committed first,
            # or the course/user vanished underneath us.
            if await self.store.get(Course, course_id) is None:
                raise NotFound("Course not found")
            if await self.store.get(User, student_id) is None:
                raise NotFound("User not found")
            logger.info(
                "enrollment.conflict",
                course_id=str(course_id),
                student_id=str(student_id),
            )
            raise AlreadyEnrolled()

        await self.events.append(
            stream_id=f"course:{course_id}",
            event_type=ENROLLMENT_CREATED,
            data={"student_id": str(student_id)},
        )
        await self.store.commit()
        logger.info("enrollment.created", course_id=str(course_id), student_id=str(student_id))
        return await self.get(course_id)
