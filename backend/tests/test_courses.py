from fastapi.testclient import TestClient
from sqlmodel import Session, select

from nuredu import models, services
from nuredu.database import engine
from nuredu.main import app

client = TestClient(app)


def _h(token):
    return {'Authorization': f'Bearer {token}'}


def test_course_lifecycle(teacher_token, student_token):
    r = client.post('/courses', json={'title': 'Intro to Python', 'description': 'Basics'}, headers=_h(teacher_token))
    assert r.status_code == 201
    course = r.json()
    assert course['student_ids'] == []

    student_id = client.get('/auth/me', headers=_h(student_token)).json()['id']
    r = client.post(f"/courses/{course['id']}/students/{student_id}", headers=_h(teacher_token))
    assert r.status_code == 200
    assert r.json()['student_ids'] == [student_id]
    again = client.post(f"/courses/{course['id']}/students/{student_id}", headers=_h(teacher_token))
    assert again.json()['student_ids'] == [student_id]

    r = client.patch(f"/courses/{course['id']}", json={'description': 'Basics, part 2'}, headers=_h(teacher_token))
    assert r.json()['description'] == 'Basics, part 2'
    assert r.json()['title'] == 'Intro to Python'

    m = client.post(f"/courses/{course['id']}/materials", json={'title': 'Slides', 'content': 'slides.pdf'}, headers=_h(teacher_token))
    assert m.status_code == 201
    materials = client.get(f"/courses/{course['id']}/materials").json()
    assert [x['title'] for x in materials] == ['Slides']

    r = client.delete(f"/courses/{course['id']}", headers=_h(teacher_token))
    assert r.status_code == 200
    assert client.get(f"/courses/{course['id']}").status_code == 404
    with Session(engine) as session:
        assert session.exec(select(models.Material).where(models.Material.course_id == course['id'])).first() is None


def test_students_cannot_create_or_edit_courses(teacher_token, student_token):
    r = client.post('/courses', json={'title': 'Nope'}, headers=_h(student_token))
    assert r.status_code == 403
    course = client.post('/courses', json={'title': 'Owned'}, headers=_h(teacher_token)).json()
    r = client.patch(f"/courses/{course['id']}", json={'title': 'Hijack'}, headers=_h(student_token))
    assert r.status_code == 403
    r = client.post(f"/courses/{course['id']}/materials", json={'title': 'x', 'content': 'y'}, headers=_h(student_token))
    assert r.status_code == 403


def test_admin_manages_any_course(teacher_token, admin_token):
    course = client.post('/courses', json={'title': 'Teacher course'}, headers=_h(teacher_token)).json()
    material = client.post(f"/courses/{course['id']}/materials", json={'title': 'Notes', 'content': 'text'}, headers=_h(teacher_token)).json()
    assert client.delete(f"/materials/{material['id']}", headers=_h(admin_token)).status_code == 200
    assert client.delete(f"/materials/{material['id']}", headers=_h(admin_token)).status_code == 404
    r = client.patch(f"/courses/{course['id']}", json={'title': ''}, headers=_h(admin_token))
    assert r.status_code == 400


def test_unknown_course_is_404(teacher_token):
    assert client.get('/courses/999999').status_code == 404
    assert client.get('/courses/999999/materials').status_code == 404
    assert client.post('/courses/999999/students/1', headers=_h(teacher_token)).status_code == 404


def test_seed_demo_data_is_idempotent():
    with Session(engine) as session:
        first = services.seed_demo_data(session)
        second = services.seed_demo_data(session)
    assert second is None
    assert first is None or first['courses'] == 2
    courses = client.get('/courses').json()
    intro = next(c for c in courses if c['title'] == 'Introduction to Programming')
    assert len(intro['student_ids']) == 2
