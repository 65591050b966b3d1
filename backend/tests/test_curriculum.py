import json

import pytest

from nuredu.curriculum import CurriculumTree, get_curriculum, load_curriculum, parse_curriculum


def test_unknown_language_returns_empty(tree):
    assert tree.specialities_for('fr') == ()
    assert tree.lesson_types_for('fr') == ()
    assert tree.specialities_for('') == ()


def test_declaration_order_is_kept(tree):
    names = [s.name for s in tree.specialities_for('us')]
    assert names == ['Software Engineering', 'Robotics']
    robotics = tree.find_speciality('us', 'Robotics')
    assert [g.number for g in robotics.grades] == [1, 3]
    se = tree.find_speciality('us', 'Software Engineering')
    assert [s.title for s in se.grades[0].lessons] == ['Intro', 'Loops']
    assert tree.lesson_types_for('us') == ('Theory', 'Practice')


def test_lookups_return_none_when_absent(tree):
    assert tree.find_speciality('us', 'Cooking') is None
    assert tree.find_speciality('ua', 'Robotics') is None
    robotics = tree.find_speciality('us', 'Robotics')
    assert tree.find_grade(robotics, 2) is None
    assert tree.find_grade(None, 1) is None
    grade = tree.find_grade(robotics, 3)
    assert tree.find_slot(grade, 1).title == 'Motors'
    assert tree.find_slot(grade, 5) is None
    assert tree.find_slot(None, 1) is None


def test_duplicate_grade_rejected():
    doc = {'specialities': {'us': [{'name': 'A', 'grades': [
        {'gradeNumber': 1, 'lessons': []}, {'gradeNumber': 1, 'lessons': []}]}]}}
    with pytest.raises(ValueError):
        parse_curriculum(doc)


def test_duplicate_lesson_queue_rejected():
    doc = {'specialities': {'us': [{'name': 'A', 'grades': [
        {'gradeNumber': 1, 'lessons': [{'queue': 1, 'title': 'x'}, {'queue': 1, 'title': 'y'}]}]}]}}
    with pytest.raises(ValueError):
        parse_curriculum(doc)


def test_missing_lesson_types_key_is_empty():
    tree = parse_curriculum({'specialities': {'us': []}})
    assert isinstance(tree, CurriculumTree)
    assert tree.lesson_types_for('us') == ()


def test_load_from_file(tmp_path):
    path = tmp_path / 'c.json'
    path.write_text(json.dumps({'specialities': {'ua': [{'name': 'B', 'grades': []}]}, 'lessonTypes': {'ua': ['T']}}), encoding='utf-8')
    tree = load_curriculum(path)
    assert tree.languages() == ('ua',)
    assert tree.lesson_types_for('ua') == ('T',)


def test_packaged_curriculum_loads():
    tree = get_curriculum()
    assert 'us' in tree.languages()
    assert tree.specialities_for('us')
    assert get_curriculum() is tree


def test_curriculum_endpoint(client):
    r = client.get('/curriculum/us')
    assert r.status_code == 200
    body = r.json()
    assert body['language'] == 'us'
    assert body['specialities'][0]['grades'][0]['gradeNumber'] >= 1
    assert 'lessons' in body['specialities'][0]['grades'][0]
    assert body['lessonTypes']


def test_curriculum_endpoint_unknown_language(client):
    r = client.get('/curriculum/xx')
    assert r.status_code == 200
    assert r.json() == {'language': 'xx', 'specialities': [], 'lessonTypes': []}
