"""Pydantic schemas for courses and their materials.

Learn: Separate schemas for create/update/read keeps the API clean.
- CourseCreate: what you POST to publish a course
- CourseUpdate: what you PUT to change one — every field optional, and
  unknown fields rejected, so the set of mutable fields is closed
  (instructor_id and the roster can never be written through it)
- CourseRead: what the API returns, with the instructor resolved to a
  public projection
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from coursehub.schemas.user import UserPublic


class MaterialKind(str, enum.Enum):
    FILE = "file"
    YOUTUBE = "youtube"
    DRIVE = "drive"
    OTHER = "other"


class Material(BaseModel):
    """A study material attached to a course. Order in the list is display order."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    kind: MaterialKind = MaterialKind.OTHER
    url: str = Field(..., min_length=1)
    size_bytes: int = Field(default=0, ge=0)


# ─── Create / update ────────────────────────────────────

class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")
    price: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    tags: list[str] = Field(default_factory=list)
    duration_label: str = Field(default="", max_length=100)
    lesson_count: int = Field(default=0, ge=0)
    thumbnail_ref: Optional[str] = None
    materials: list[Material] = Field(default_factory=list)


# Fields an explicit null resets, and what it resets them to. A null on any
# other field is ignored; those columns are never empty.
_CLEARABLE = {"thumbnail_ref": None, "description": ""}


class CourseUpdate(BaseModel):
    """Partial update — only fields present in the request are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    tags: Optional[list[str]] = None
    duration_label: Optional[str] = Field(None, max_length=100)
    lesson_count: Optional[int] = Field(None, ge=0)
    thumbnail_ref: Optional[str] = None
    materials: Optional[list[Material]] = None

    model_config = {"extra": "forbid"}

    def changes(self) -> dict:
        """The fields to apply, JSON-ready (materials as plain dicts)."""
        data = self.model_dump(mode="json")
        fields = {}
        for name in sorted(self.model_fields_set):
            value = data[name]
            if value is None:
                if name not in _CLEARABLE:
                    continue
                value = _CLEARABLE[name]
            fields[name] = value
        return fields


# ─── Read ───────────────────────────────────────────────

class CourseRead(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    price: float
    tags: list[str]
    duration_label: str
    lesson_count: int
    thumbnail_ref: Optional[str]
    materials: list[Material]
    instructor_id: uuid.UUID
    instructor: UserPublic
    enrolled_student_ids: list[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
