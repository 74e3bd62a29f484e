"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Relationships, constraints, and indexes defined here.
Alembic migrations mirror these models.

Key concepts:
- UUID primary keys via the portable Uuid type (native on PostgreSQL,
  CHAR(32) on SQLite)
- JSON columns for ordered lists (tags, materials) so client order survives
- Enrollment is its own table with a UNIQUE (course_id, student_id) pair:
  the database, not application code, decides which of two concurrent
  enrollments wins
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class Role(str, enum.Enum):
    """Closed set of account roles, fixed at registration."""

    INSTRUCTOR = "instructor"
    STUDENT = "student"


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


# ══════════════════════════════════════════════════════════════
# Identities
# ══════════════════════════════════════════════════════════════


class User(Base):
    """A registered account — either an instructor or a student.

    Learn: email is stored lower-cased so the UNIQUE constraint doubles
    as a case-insensitive uniqueness check.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Courses and enrollments
# ══════════════════════════════════════════════════════════════


class Course(Base):
    """A published course, owned by exactly one instructor.

    Learn: tags and materials are JSON arrays, not child tables — they
    have no lifecycle of their own and their order is the display order.
    """

    __tablename__ = "courses"
    __table_args__ = (
        Index("idx_courses_instructor", "instructor_id"),
        Index("idx_courses_created", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    instructor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    duration_label: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    lesson_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thumbnail_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    materials: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list
    )  # [{id, name, kind, url, size_bytes}]
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Read-only relationships, always loaded; async sessions cannot lazy-load.
    # Enrollments are written as Enrollment rows, never through the collection.
    instructor: Mapped["User"] = relationship(lazy="selectin", viewonly=True)
    enrollments: Mapped[list["Enrollment"]] = relationship(
        lazy="selectin", order_by="Enrollment.id", viewonly=True
    )

    @property
    def enrolled_student_ids(self) -> list[uuid.UUID]:
        return [e.student_id for e in self.enrollments]


class Enrollment(Base):
    """Membership of a student in a course.

    Learn: The UNIQUE constraint is the storage-level "insert if absent".
    Two concurrent enrollments of the same pair cannot both commit.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("course_id", "student_id", name="uq_enrollments_course_student"),
        Index("idx_enrollments_student", "student_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Audit trail
# ══════════════════════════════════════════════════════════════


class Event(Base):
    """Append-only audit log of state changes.

    stream_id examples: "course:<uuid>", "user:<uuid>"
    type examples: "course.created", "enrollment.created", "account.deleted"
    """

    __tablename__ = "events"
    __table_args__ = (
        Index("idx_events_stream", "stream_id", "id"),
        Index("idx_events_type", "type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    stream_id: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    meta: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )  # actor_id, request_id
    # Note: Python attr is "meta" because "metadata" is reserved by SQLAlchemy.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
