"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Lesson schemas use camelCase names on
the wire (`chapterQueue`, `lessonEquipment`, ...) and snake_case in
Python.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional


class RegisterIn(BaseModel):
    """Payload for user registration/login endpoints."""
    username: str
    password: str


class TokenOut(BaseModel):
    """Authentication response containing an access token."""
    access_token: str


class RoleIn(BaseModel):
    """Payload naming a role to create or grant."""
    name: str = Field(min_length=1)


class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str


class UserOut(BaseModel):
    """Public view of a user: never includes the password hash."""
    id: int
    username: str
    roles: List[str] = []


class CourseIn(BaseModel):
    """Payload for creating a course."""
    title: str = Field(min_length=1)
    description: str = ''


class CourseUpdate(BaseModel):
    """Partial course update; omitted fields keep their value."""
    title: Optional[str] = None
    description: Optional[str] = None


class CourseOut(BaseModel):
    id: int
    title: str
    description: str
    teacher_id: Optional[int] = None
    student_ids: List[int] = []


class MaterialIn(BaseModel):
    """Payload for attaching a material to a course."""
    title: str = Field(min_length=1)
    content: str


class MaterialOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    content: str
    course_id: Optional[int] = None


class LessonPayload(BaseModel):
    """Persistence shape of a lesson as sent by create/update calls.

    The list-like fields carry JSON array text (see
    `nuredu.utils.serialized`).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    language: str
    grade: int
    chapter_queue: int
    chapter: str
    topic_title: str = ''
    topic_queue: int = 0
    lesson_type: str = ''
    lesson_objectives: str = ''
    lesson_equipment: str = '[]'
    prior_knowledge: str = ''
    lesson_start: str = ''
    lesson_middle: str = ''
    lesson_end: str = ''
    video_links: str = '[]'
    presentation_links: str = '[]'
    link_for_doc: str = ''
    additional_resources: str = '[]'


class LessonOut(LessonPayload):
    """A stored lesson row as returned by `GET /lessons`."""
    id: str


class LessonRecord(BaseModel):
    """A stored lesson with its list-like fields decoded.

    This is what the gateway hands to the directory view and the edit
    form.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    language: str = ''
    grade: int = 0
    chapter_queue: int = 0
    chapter: str = ''
    topic_title: str = ''
    topic_queue: int = 0
    lesson_type: str = ''
    lesson_objectives: str = ''
    lesson_equipment: List[str] = []
    prior_knowledge: str = ''
    lesson_start: str = ''
    lesson_middle: str = ''
    lesson_end: str = ''
    video_links: List[str] = []
    presentation_links: List[str] = []
    link_for_doc: str = ''
    additional_resources: List[str] = []


class LessonDeleteIn(BaseModel):
    """Batch delete request listing lesson ids."""
    ids: List[str]
