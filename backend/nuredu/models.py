"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Each class maps to a table and uses relationships where appropriate.
"""

import uuid
from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone
from typing import List


class UserRoleLink(SQLModel, table=True):
    """Association table between users and roles."""
    user_id: Optional[int] = Field(default=None, foreign_key='user.id', primary_key=True)
    role_id: Optional[int] = Field(default=None, foreign_key='role.id', primary_key=True)


class CourseStudentLink(SQLModel, table=True):
    """Association table tracking which users are enrolled in which courses."""
    user_id: Optional[int] = Field(default=None, foreign_key='user.id', primary_key=True)
    course_id: Optional[int] = Field(default=None, foreign_key='course.id', primary_key=True)


class Role(SQLModel, table=True):
    """A named role such as `admin`, `teacher` or `student`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False, unique=True)
    users: List['User'] = Relationship(back_populates='roles', link_model=UserRoleLink)


class User(SQLModel, table=True):
    """A registered user.

    Fields:
    - `username`: unique login name
    - `password_hash`: hashed password string (never store plaintext)
    - `roles`: the roles granted to the user; a user may hold several
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    roles: List[Role] = Relationship(back_populates='users', link_model=UserRoleLink)
    courses: List['Course'] = Relationship(back_populates='students', link_model=CourseStudentLink)
    taught_courses: List['Course'] = Relationship(back_populates='teacher')

    def role_names(self) -> List[str]:
        return sorted(r.name for r in self.roles)

    def has_role(self, name: str) -> bool:
        return any(r.name.lower() == name.lower() for r in self.roles)


class Course(SQLModel, table=True):
    """A course taught by a user with enrolled students and materials."""
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str = ''
    teacher_id: Optional[int] = Field(default=None, foreign_key='user.id')
    teacher: Optional[User] = Relationship(back_populates='taught_courses')
    students: List[User] = Relationship(back_populates='courses', link_model=CourseStudentLink)
    materials: List['Material'] = Relationship(back_populates='course')


class Material(SQLModel, table=True):
    """Study material attached to a `Course`.

    `content` is either inline text or a file path/URL.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    content: str
    course_id: Optional[int] = Field(default=None, foreign_key='course.id')
    course: Optional[Course] = Relationship(back_populates='materials')


class Lesson(SQLModel, table=True):
    """An authored curriculum lesson.

    `chapter` is a copy of the curriculum lesson-slot title taken when the
    lesson was created; there is no foreign key back to the slot. The
    four list-like columns (`lesson_equipment`, `video_links`,
    `presentation_links`, `additional_resources`) hold JSON array text.
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    language: str = Field(index=True)
    grade: int = Field(index=True)
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
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
