"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
roles, courses, materials, lessons). Repositories return SQLModel
objects and perform commits/refreshes where appropriate.
"""

from typing import Iterable, List, Optional
from sqlmodel import Session, select
from . import models


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def save(self, user: models.User) -> models.User:
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_username(self, username: str) -> Optional[models.User]:
        """Return a `User` by username or `None` if not found."""
        stmt = select(models.User).where(models.User.username == username)
        return self.session.exec(stmt).first()

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key."""
        return self.session.get(models.User, user_id)

    def list(self) -> List[models.User]:
        return self.session.exec(select(models.User).order_by(models.User.id)).all()


class RoleRepository:
    """Lookups and inserts for `Role` rows."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, role: models.Role) -> models.Role:
        self.session.add(role)
        self.session.commit()
        self.session.refresh(role)
        return role

    def get_by_name(self, name: str) -> Optional[models.Role]:
        """Return the role called `name` or `None`."""
        stmt = select(models.Role).where(models.Role.name == name)
        return self.session.exec(stmt).first()

    def list(self) -> List[models.Role]:
        return self.session.exec(select(models.Role).order_by(models.Role.id)).all()


class CourseRepository:
    """CRUD operations for `Course` records and their enrolments."""
    def __init__(self, session: Session):
        self.session = session

    def save(self, course: models.Course) -> models.Course:
        """Insert or update a course and return the refreshed instance."""
        self.session.add(course)
        self.session.commit()
        self.session.refresh(course)
        return course

    def get(self, course_id: int) -> Optional[models.Course]:
        return self.session.get(models.Course, course_id)

    def list(self) -> List[models.Course]:
        return self.session.exec(select(models.Course).order_by(models.Course.id)).all()

    def delete(self, course: models.Course) -> None:
        """Delete a course together with its materials and enrolment links."""
        for m in list(course.materials):
            self.session.delete(m)
        course.students = []
        self.session.delete(course)
        self.session.commit()


class MaterialRepository:
    """Query helpers for `Material` records."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, material: models.Material) -> models.Material:
        self.session.add(material)
        self.session.commit()
        self.session.refresh(material)
        return material

    def get(self, material_id: int) -> Optional[models.Material]:
        return self.session.get(models.Material, material_id)

    def list_for_course(self, course_id: int) -> List[models.Material]:
        """List all materials attached to `course_id`."""
        stmt = select(models.Material).where(models.Material.course_id == course_id).order_by(models.Material.id)
        return self.session.exec(stmt).all()

    def delete(self, material: models.Material) -> None:
        self.session.delete(material)
        self.session.commit()


class LessonRepository:
    """CRUD operations for authored curriculum `Lesson` rows."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, lesson: models.Lesson) -> models.Lesson:
        """Persist a new lesson; the id is generated by the model."""
        self.session.add(lesson)
        self.session.commit()
        self.session.refresh(lesson)
        return lesson

    def get(self, lesson_id: str) -> Optional[models.Lesson]:
        return self.session.get(models.Lesson, lesson_id)

    def list(self) -> List[models.Lesson]:
        """Return all lessons in creation order."""
        stmt = select(models.Lesson).order_by(models.Lesson.created_at)
        return self.session.exec(stmt).all()

    def update(self, lesson: models.Lesson, values: dict) -> models.Lesson:
        for key, value in values.items():
            setattr(lesson, key, value)
        self.session.add(lesson)
        self.session.commit()
        self.session.refresh(lesson)
        return lesson

    def delete_many(self, lesson_ids: Iterable[str]) -> int:
        """Delete every lesson whose id is in `lesson_ids`.

        Unknown ids are ignored. Returns the number of rows removed.
        """
        ids = list(set(lesson_ids))
        if not ids:
            return 0
        rows = self.session.exec(select(models.Lesson).where(models.Lesson.id.in_(ids))).all()
        for row in rows:
            self.session.delete(row)
        self.session.commit()
        return len(rows)
