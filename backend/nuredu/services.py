"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and auxiliary logic. Services are intentionally thin: they perform
validation, execute domain logic and persist aggregates via
repositories. Domain problems raise `ValueError`, missing rows raise
`LookupError` and ownership failures raise `PermissionError`; the
controllers translate those into HTTP status codes.
"""

from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
import jwt
from typing import Iterable, List, Optional
from . import models, repositories, schemas
from .config import settings
from sqlmodel import Session

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
JWT_SECRET = settings.JWT_SECRET
JWT_ALGORITHM = settings.JWT_ALGORITHM
JWT_EXPIRE_HOURS = settings.JWT_EXPIRE_HOURS

ADMIN_ROLE = "admin"
TEACHER_ROLE = "teacher"
STUDENT_ROLE = "student"
DEFAULT_ROLES = (ADMIN_ROLE, TEACHER_ROLE, STUDENT_ROLE)


class AuthService:
    """Authentication related operations (register + authenticate)."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)
        self.role_service = RoleService(session)

    def register(self, username: str, password: str) -> models.User:
        """Create a new user with a hashed password and the `student` role.

        Returns the persisted `User` instance.
        """
        hashed = PWD_CTX.hash(password)
        u = models.User(username=username, password_hash=hashed)
        u.roles = [self.role_service.get_or_create(STUDENT_ROLE)]
        return self.user_repo.create(u)

    def authenticate(self, username: str, password: str):
        """Verify credentials and return a signed JWT token on success.

        Returns `None` if authentication fails.
        """
        user = self.user_repo.get_by_username(username)
        if not user:
            return None
        if not PWD_CTX.verify(password, user.password_hash):
            return None
        expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRE_HOURS)
        payload = {
            "user_id": user.id,
            "username": user.username,
            "roles": user.role_names(),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


class RoleService:
    """Create and look up roles."""
    def __init__(self, session: Session):
        self.session = session
        self.role_repo = repositories.RoleRepository(session)

    def create(self, name: str) -> models.Role:
        name = name.strip().lower()
        if not name:
            raise ValueError("role name must not be empty")
        if self.role_repo.get_by_name(name):
            raise ValueError(f"role already exists: {name}")
        return self.role_repo.create(models.Role(name=name))

    def get_or_create(self, name: str) -> models.Role:
        return self.role_repo.get_by_name(name) or self.role_repo.create(models.Role(name=name))

    def ensure_defaults(self) -> List[models.Role]:
        """Make sure the `admin`, `teacher` and `student` roles exist."""
        return [self.get_or_create(n) for n in DEFAULT_ROLES]


class UserService:
    """Role grants and public user views."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)
        self.role_repo = repositories.RoleRepository(session)

    def get(self, user_id: int) -> models.User:
        user = self.user_repo.get(user_id)
        if not user:
            raise LookupError(f"user not found: {user_id}")
        return user

    def grant_role(self, user_id: int, role_name: str) -> models.User:
        user = self.get(user_id)
        role = self.role_repo.get_by_name(role_name.strip().lower())
        if not role:
            raise ValueError(f"unknown role: {role_name}")
        if not user.has_role(role.name):
            user.roles.append(role)
            user = self.user_repo.save(user)
        return user

    def revoke_role(self, user_id: int, role_name: str) -> models.User:
        user = self.get(user_id)
        user.roles = [r for r in user.roles if r.name != role_name.strip().lower()]
        return self.user_repo.save(user)

    @staticmethod
    def to_out(user: models.User) -> schemas.UserOut:
        return schemas.UserOut(id=user.id, username=user.username, roles=user.role_names())


class CourseService:
    """Courses, their enrolments and materials."""
    def __init__(self, session: Session):
        self.session = session
        self.course_repo = repositories.CourseRepository(session)
        self.material_repo = repositories.MaterialRepository(session)
        self.user_repo = repositories.UserRepository(session)

    def get(self, course_id: int) -> models.Course:
        course = self.course_repo.get(course_id)
        if not course:
            raise LookupError(f"course not found: {course_id}")
        return course

    def create(self, teacher: models.User, data: schemas.CourseIn) -> models.Course:
        """Create a course taught by `teacher`.

        Only users holding the `teacher` or `admin` role may create courses.
        """
        if not (teacher.has_role(TEACHER_ROLE) or teacher.has_role(ADMIN_ROLE)):
            raise PermissionError("only teachers can create courses")
        course = models.Course(title=data.title, description=data.description, teacher_id=teacher.id)
        return self.course_repo.save(course)

    def check_can_manage(self, user: models.User, course: models.Course) -> None:
        """Raise `PermissionError` unless `user` is an admin or the course teacher."""
        if user.has_role(ADMIN_ROLE) or course.teacher_id == user.id:
            return
        raise PermissionError("not allowed to manage this course")

    def update(self, user: models.User, course_id: int, data: schemas.CourseUpdate) -> models.Course:
        course = self.get(course_id)
        self.check_can_manage(user, course)
        if data.title is not None:
            if not data.title.strip():
                raise ValueError("title must not be empty")
            course.title = data.title
        if data.description is not None:
            course.description = data.description
        return self.course_repo.save(course)

    def delete(self, user: models.User, course_id: int) -> None:
        course = self.get(course_id)
        self.check_can_manage(user, course)
        self.course_repo.delete(course)

    def enroll(self, user: models.User, course_id: int, student_id: int) -> models.Course:
        """Enroll `student_id` in the course; enrolling twice is a no-op."""
        course = self.get(course_id)
        self.check_can_manage(user, course)
        student = self.user_repo.get(student_id)
        if not student:
            raise LookupError(f"user not found: {student_id}")
        if all(s.id != student.id for s in course.students):
            course.students.append(student)
            course = self.course_repo.save(course)
        return course

    def add_material(self, user: models.User, course_id: int, data: schemas.MaterialIn) -> models.Material:
        course = self.get(course_id)
        self.check_can_manage(user, course)
        return self.material_repo.create(models.Material(title=data.title, content=data.content, course_id=course.id))

    def list_materials(self, course_id: int) -> List[models.Material]:
        self.get(course_id)
        return self.material_repo.list_for_course(course_id)

    def delete_material(self, user: models.User, material_id: int) -> None:
        material = self.material_repo.get(material_id)
        if not material:
            raise LookupError(f"material not found: {material_id}")
        self.check_can_manage(user, self.get(material.course_id))
        self.material_repo.delete(material)

    @staticmethod
    def to_out(course: models.Course) -> schemas.CourseOut:
        return schemas.CourseOut(
            id=course.id,
            title=course.title,
            description=course.description,
            teacher_id=course.teacher_id,
            student_ids=sorted(s.id for s in course.students),
        )


class LessonService:
    """Store authored curriculum lessons.

    The service does not check lessons against the curriculum document:
    `chapter` and `chapter_queue` are stored exactly as submitted.
    """
    def __init__(self, session: Session):
        self.session = session
        self.lesson_repo = repositories.LessonRepository(session)

    def create(self, payload: schemas.LessonPayload) -> models.Lesson:
        return self.lesson_repo.create(models.Lesson(**payload.model_dump()))

    def list(self) -> List[models.Lesson]:
        return self.lesson_repo.list()

    def update(self, lesson_id: str, payload: schemas.LessonPayload) -> models.Lesson:
        """Replace every field of lesson `lesson_id` with `payload`."""
        lesson = self.lesson_repo.get(lesson_id)
        if not lesson:
            raise LookupError(f"lesson not found: {lesson_id}")
        return self.lesson_repo.update(lesson, payload.model_dump())

    def delete_many(self, lesson_ids: Iterable[str]) -> int:
        return self.lesson_repo.delete_many(lesson_ids)


def seed_demo_data(session: Session) -> Optional[dict]:
    """Insert demo roles, users and courses unless they already exist.

    Returns a summary of what was created, or `None` when the demo data
    was already present.
    """
    users = repositories.UserRepository(session)
    if users.get_by_username("adminTeacherUser"):
        return None
    admin, teacher, student = RoleService(session).ensure_defaults()

    def _user(username, password, roles):
        u = models.User(username=username, password_hash=PWD_CTX.hash(password))
        u.roles = roles
        return users.create(u)

    admin_teacher = _user("adminTeacherUser", "admin", [admin, teacher])
    student1 = _user("studentUser", "student", [student])
    student2 = _user("studentUser2", "student", [student])
    _user("multiRoleUser", "multi", [admin, teacher, student])

    courses = repositories.CourseRepository(session)
    intro = models.Course(title="Introduction to Programming", description="Learn the basics of programming.", teacher_id=admin_teacher.id)
    algo = models.Course(title="Advanced Algorithms", description="Learn about advanced algorithms.", teacher_id=admin_teacher.id)
    intro.students = [student1, student2]
    algo.students = [student1]
    courses.save(intro)
    courses.save(algo)
    return {"roles": 3, "users": 4, "courses": 2}
