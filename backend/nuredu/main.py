"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the nuredu backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses.

Endpoints implemented:
- POST /auth/register, POST /auth/login, GET /auth/me
- GET/POST /roles
- GET /users, GET /users/{id}, POST /users/{id}/roles, DELETE /users/{id}/roles/{name}
- GET/POST /courses, GET/PATCH/DELETE /courses/{id}
- POST /courses/{id}/students/{user_id}
- GET/POST /courses/{id}/materials, DELETE /materials/{id}
- GET /curriculum/{language}
- GET/POST /lessons, PUT /lessons/{id}, POST /lessons/delete
- GET /health
"""

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
import os
import json
import logging
import time
import uuid
from typing import List
from .database import engine, create_db_and_tables, get_session
from . import services, repositories, models, schemas
from .auth import get_current_user, require_admin
from .curriculum import get_curriculum
from .config import settings

app = FastAPI(title="nuredu Curriculum API")
logger = logging.getLogger("nuredu.api")
if not logger.handlers:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

# Wide-open CORS lets the admin frontend talk to a local API in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()
with Session(engine) as _session:
    services.RoleService(_session).ensure_defaults()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


def _http_error(exc: Exception) -> HTTPException:
    """Translate a service exception into the matching HTTP error."""
    if isinstance(exc, PermissionError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, LookupError):
        return HTTPException(status_code=404, detail=str(exc).strip("'"))
    return HTTPException(status_code=400, detail=str(exc))


# auth

@app.post('/auth/register')
def register(payload: schemas.RegisterIn, db: Session = Depends(get_session)):
    """Register a new user (idempotent).

    Returns existing user if the username already exists to make the
    operation idempotent (useful for automation/tests). New users get
    the `student` role.
    """
    existing = repositories.UserRepository(db).get_by_username(payload.username)
    if existing:
        return {'id': existing.id, 'username': existing.username}
    user = services.AuthService(db).register(payload.username, payload.password)
    return {'id': user.id, 'username': user.username}


@app.post('/auth/login', response_model=schemas.TokenOut)
def login(payload: schemas.RegisterIn, db: Session = Depends(get_session)):
    """Authenticate a user and return a short-lived JWT token.

    The returned token contains `user_id`, `username` and `roles` and is
    signed using the configured JWT secret.
    """
    token = services.AuthService(db).authenticate(payload.username, payload.password)
    if not token:
        raise HTTPException(status_code=401, detail='invalid credentials')
    return {'access_token': token}


@app.get('/auth/me', response_model=schemas.UserOut)
def me(user: models.User = Depends(get_current_user)):
    return services.UserService.to_out(user)


# roles and users

@app.get('/roles', response_model=List[schemas.RoleOut])
def list_roles(db: Session = Depends(get_session)):
    return repositories.RoleRepository(db).list()


@app.post('/roles', response_model=schemas.RoleOut, status_code=201)
def create_role(payload: schemas.RoleIn, db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    try:
        return services.RoleService(db).create(payload.name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get('/users', response_model=List[schemas.UserOut])
def list_users(db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    return [services.UserService.to_out(u) for u in repositories.UserRepository(db).list()]


@app.get('/users/{user_id}', response_model=schemas.UserOut)
def get_user(user_id: int, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    try:
        return services.UserService.to_out(services.UserService(db).get(user_id))
    except LookupError as e:
        raise _http_error(e)


@app.post('/users/{user_id}/roles', response_model=schemas.UserOut)
def grant_role(user_id: int, payload: schemas.RoleIn, db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    """Grant an existing role to a user; granting twice is a no-op."""
    try:
        return services.UserService.to_out(services.UserService(db).grant_role(user_id, payload.name))
    except (ValueError, LookupError) as e:
        raise _http_error(e)


@app.delete('/users/{user_id}/roles/{role_name}', response_model=schemas.UserOut)
def revoke_role(user_id: int, role_name: str, db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    try:
        return services.UserService.to_out(services.UserService(db).revoke_role(user_id, role_name))
    except LookupError as e:
        raise _http_error(e)


# courses and materials

@app.get('/courses', response_model=List[schemas.CourseOut])
def list_courses(db: Session = Depends(get_session)):
    return [services.CourseService.to_out(c) for c in repositories.CourseRepository(db).list()]


@app.post('/courses', response_model=schemas.CourseOut, status_code=201)
def create_course(payload: schemas.CourseIn, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    """Create a course taught by the caller (teacher or admin role required)."""
    try:
        return services.CourseService.to_out(services.CourseService(db).create(user, payload))
    except PermissionError as e:
        raise _http_error(e)


@app.get('/courses/{course_id}', response_model=schemas.CourseOut)
def get_course(course_id: int, db: Session = Depends(get_session)):
    try:
        return services.CourseService.to_out(services.CourseService(db).get(course_id))
    except LookupError as e:
        raise _http_error(e)


@app.patch('/courses/{course_id}', response_model=schemas.CourseOut)
def update_course(course_id: int, payload: schemas.CourseUpdate, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    try:
        return services.CourseService.to_out(services.CourseService(db).update(user, course_id, payload))
    except (ValueError, LookupError, PermissionError) as e:
        raise _http_error(e)


@app.delete('/courses/{course_id}')
def delete_course(course_id: int, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    try:
        services.CourseService(db).delete(user, course_id)
    except (LookupError, PermissionError) as e:
        raise _http_error(e)
    return {'status': 'ok'}


@app.post('/courses/{course_id}/students/{student_id}', response_model=schemas.CourseOut)
def enroll_student(course_id: int, student_id: int, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    try:
        return services.CourseService.to_out(services.CourseService(db).enroll(user, course_id, student_id))
    except (LookupError, PermissionError) as e:
        raise _http_error(e)


@app.get('/courses/{course_id}/materials', response_model=List[schemas.MaterialOut])
def list_materials(course_id: int, db: Session = Depends(get_session)):
    try:
        return services.CourseService(db).list_materials(course_id)
    except LookupError as e:
        raise _http_error(e)


@app.post('/courses/{course_id}/materials', response_model=schemas.MaterialOut, status_code=201)
def add_material(course_id: int, payload: schemas.MaterialIn, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    try:
        return services.CourseService(db).add_material(user, course_id, payload)
    except (LookupError, PermissionError) as e:
        raise _http_error(e)


@app.delete('/materials/{material_id}')
def delete_material(material_id: int, db: Session = Depends(get_session), user: models.User = Depends(get_current_user)):
    try:
        services.CourseService(db).delete_material(user, material_id)
    except (LookupError, PermissionError) as e:
        raise _http_error(e)
    return {'status': 'ok'}


# curriculum and lessons

@app.get('/curriculum/{language}')
def curriculum(language: str):
    """Return the specialities and lesson types configured for `language`.

    Unknown languages return empty lists rather than 404.
    """
    return get_curriculum().to_document(language)


def _lesson_out(lesson: models.Lesson) -> schemas.LessonOut:
    return schemas.LessonOut.model_validate(lesson.model_dump())


@app.get('/lessons', response_model=List[schemas.LessonOut])
def list_lessons(db: Session = Depends(get_session)):
    """List every stored lesson with list fields still serialized."""
    return [_lesson_out(l) for l in services.LessonService(db).list()]


@app.post('/lessons', response_model=schemas.LessonOut, status_code=201)
def create_lesson(payload: schemas.LessonPayload, db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    lesson = services.LessonService(db).create(payload)
    logger.info("lesson created id=%s language=%s grade=%s queue=%s", lesson.id, lesson.language, lesson.grade, lesson.chapter_queue)
    return _lesson_out(lesson)


@app.put('/lessons/{lesson_id}', response_model=schemas.LessonOut)
def update_lesson(lesson_id: str, payload: schemas.LessonPayload, db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    try:
        lesson = services.LessonService(db).update(lesson_id, payload)
    except LookupError as e:
        raise _http_error(e)
    return _lesson_out(lesson)


@app.post('/lessons/delete')
def delete_lessons(payload: schemas.LessonDeleteIn, db: Session = Depends(get_session), admin: models.User = Depends(require_admin)):
    """Delete a batch of lessons by id; unknown ids are ignored."""
    deleted = services.LessonService(db).delete_many(payload.ids)
    logger.info("lessons deleted requested=%d deleted=%d", len(payload.ids), deleted)
    return {'deleted': deleted}


@app.get("/", response_class=HTMLResponse)
def home():
    """Minimal homepage for quick manual testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="UTF-8" />
      <title>nuredu API</title>
      <style>
        body { font-family: Arial, sans-serif; margin: 32px; }
        a { color: #0a6; }
        .card { max-width: 640px; padding: 16px; border: 1px solid #ddd; border-radius: 8px; }
      </style>
    </head>
    <body>
      <div class="card">
        <h1>nuredu Curriculum API</h1>
        <ul>
          <li><a href="/docs">Swagger UI</a></li>
          <li><a href="/curriculum/us">Curriculum (English)</a></li>
          <li><a href="/lessons">Stored lessons</a></li>
        </ul>
        <p>Use <code>/auth/register</code> + <code>/auth/login</code> to get a token; lesson changes need the <code>admin</code> role.</p>
      </div>
    </body>
    </html>
    """


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
