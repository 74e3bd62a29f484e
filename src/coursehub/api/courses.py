"""Course API routes.

Learn: These routes are the HTTP face of the course registry. The
guard runs as dependencies, in order: valid session (401), then the
instructor role for writes (403). Ownership (403) and existence (404)
are checked by the registry itself before it writes anything.

Enrollment only needs a session — any authenticated account can
enroll. A repeated enrollment is a 409 with code "already_enrolled",
never a silent second success.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.auth.dependencies import get_current_identity, require_instructor
from coursehub.auth.identity import CurrentIdentity
from coursehub.db.engine import get_db
from coursehub.errors import CoursehubError, to_http_exception
from coursehub.schemas.course import CourseCreate, CourseRead, CourseUpdate
from coursehub.services.course_registry import CourseRegistry

router = APIRouter(prefix="/courses")


def _svc(db: AsyncSession = Depends(get_db)) -> CourseRegistry:
    return CourseRegistry(db)


@router.post("", response_model=CourseRead, status_code=201)
async def create_course(
    body: CourseCreate,
    identity: CurrentIdentity = Depends(require_instructor),
    svc: CourseRegistry = Depends(_svc),
):
    """Publish a course owned by the calling instructor."""
    try:
        return await svc.create(identity.user_id, body)
    except CoursehubError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[CourseRead])
async def list_courses(svc: CourseRegistry = Depends(_svc)):
    """List every course with its instructor's public profile. No auth."""
    try:
        return await svc.list_courses()
    except CoursehubError as e:
        raise to_http_exception(e)


@router.get("/{course_id}", response_model=CourseRead)
async def get_course(course_id: uuid.UUID, svc: CourseRegistry = Depends(_svc)):
    try:
        return await svc.get(course_id)
    except CoursehubError as e:
        raise to_http_exception(e)


@router.put("/{course_id}", response_model=CourseRead)
async def update_course(
    course_id: uuid.UUID,
    body: CourseUpdate,
    identity: CurrentIdentity = Depends(require_instructor),
    svc: CourseRegistry = Depends(_svc),
):
    """Partially update a course. Only the owner may do this."""
    try:
        return await svc.update(course_id, identity.user_id, body)
    except CoursehubError as e:
        raise to_http_exception(e)


@router.delete("/{course_id}")
async def delete_course(
    course_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_instructor),
    svc: CourseRegistry = Depends(_svc),
):
    """Permanently delete a course and its roster. Only the owner may do this."""
    try:
        await svc.delete(course_id, identity.user_id)
    except CoursehubError as e:
        raise to_http_exception(e)
    return {"deleted": True}


@router.post("/{course_id}/enroll", response_model=CourseRead)
async def enroll(
    course_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: CourseRegistry = Depends(_svc),
):
    """Enroll the caller in a course."""
    try:
        return await svc.enroll(course_id, identity.user_id)
    except CoursehubError as e:
        raise to_http_exception(e)
