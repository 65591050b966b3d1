import httpx
import pytest
from sqlmodel import Session

from nuredu import models, repositories
from nuredu.database import engine
from nuredu.directory import LessonDirectory
from nuredu.errors import NetworkError, ParseError
from nuredu.gateway import LessonGateway
from nuredu.lesson_form import LessonForm


def _draft(tree, topic='Variables'):
    form = LessonForm(tree, language='us', notifier=lambda *a: None)
    form.select_speciality('Software Engineering')
    form.select_grade(2)
    form.select_lesson_slot(1)
    form.topic_title = topic
    form.lesson_equipment = ['Laptop', 'Projector']
    form.video_links = ['https://example.com/a?x=1&y="2"']
    return form


def test_create_list_update_delete_through_gateway(client, admin_token, tree):
    gateway = LessonGateway(client=client, token=admin_token)
    directory = LessonDirectory(gateway, tree, language='us', role='admin', notifier=lambda *a: None)

    form = _draft(tree, topic='Gateway topic')
    assert form.submit(gateway, on_success=directory.refresh) is True
    created = [r for r in directory.records if r.topic_title == 'Gateway topic']
    assert len(created) == 1
    record = created[0]
    assert record.chapter == 'Functions'
    assert record.grade == 2
    assert record.chapter_queue == 1
    assert record.lesson_equipment == ['Laptop', 'Projector']
    assert record.video_links == ['https://example.com/a?x=1&y="2"']
    assert record.presentation_links == []

    edit = LessonForm.from_record(tree, record, notifier=lambda *a: None)
    edit.topic_title = 'Gateway topic (edited)'
    edit.additional_resources = ['Book']
    assert edit.submit(gateway, on_success=directory.refresh) is True
    [updated] = [r for r in directory.records if r.id == record.id]
    assert updated.topic_title == 'Gateway topic (edited)'
    assert updated.additional_resources == ['Book']

    directory.select_speciality(tree.find_speciality('us', 'Software Engineering'))
    directory.select_grade(2)
    assert record.id in {r.id for r in directory.visible_lessons()}
    directory.toggle_mark(record.id)
    assert directory.commit_delete() is True
    assert record.id not in {r.id for r in directory.records}


def test_list_is_public_and_camel_cased(client, admin_token, tree):
    gateway = LessonGateway(client=client, token=admin_token)
    gateway.create(_draft(tree, topic='Wire shape').to_persistence_payload())
    rows = client.get('/lessons').json()
    row = next(r for r in rows if r['topicTitle'] == 'Wire shape')
    assert row['chapterQueue'] == 1
    assert row['lessonEquipment'] == '["Laptop", "Projector"]'
    assert row['presentationLinks'] == '[]'
    assert isinstance(row['id'], str) and row['id']
    gateway.delete({row['id']})


def test_mutations_require_admin(client, student_token, tree):
    gateway = LessonGateway(client=client, token=student_token)
    with pytest.raises(NetworkError) as exc:
        gateway.create(_draft(tree).to_persistence_payload())
    assert exc.value.status_code == 403
    with pytest.raises(NetworkError):
        gateway.delete({'anything'})


def test_mutations_without_token_rejected(client, tree):
    gateway = LessonGateway(client=client)
    with pytest.raises(NetworkError) as exc:
        gateway.create(_draft(tree).to_persistence_payload())
    assert exc.value.status_code in (401, 403)


def test_update_unknown_lesson_is_404(client, admin_token, tree):
    payload = _draft(tree).to_persistence_payload().model_dump(by_alias=True)
    payload['id'] = 'does-not-exist'
    with pytest.raises(NetworkError) as exc:
        LessonGateway(client=client, token=admin_token).update(payload)
    assert exc.value.status_code == 404


def test_batch_delete_ignores_unknown_ids(client, admin_token):
    r = client.post('/lessons/delete', json={'ids': ['nope-1', 'nope-2']}, headers={'Authorization': f'Bearer {admin_token}'})
    assert r.status_code == 200
    assert r.json() == {'deleted': 0}


def test_list_raises_parse_error_for_malformed_stored_value(client):
    with Session(engine) as session:
        bad = repositories.LessonRepository(session).create(models.Lesson(
            language='us', grade=1, chapter_queue=1, chapter='Intro', video_links='not-json'))
        bad_id = bad.id
    try:
        with pytest.raises(ParseError) as exc:
            LessonGateway(client=client).list()
        assert exc.value.field == 'videoLinks'
    finally:
        with Session(engine) as session:
            repositories.LessonRepository(session).delete_many([bad_id])


def test_transport_failure_becomes_network_error():
    def handler(request):
        raise httpx.ConnectError('refused', request=request)

    http = httpx.Client(base_url='http://lessons.invalid', transport=httpx.MockTransport(handler))
    gateway = LessonGateway(client=http)
    with pytest.raises(NetworkError):
        gateway.list()
    with pytest.raises(NetworkError):
        gateway.delete({'a'})


def test_empty_success_body_becomes_network_error_and_unblocks_delete(tree):
    def handler(request):
        return httpx.Response(204)

    http = httpx.Client(base_url='http://lessons.invalid', transport=httpx.MockTransport(handler))
    gateway = LessonGateway(client=http)
    with pytest.raises(NetworkError):
        gateway.create({'language': 'us'})
    with pytest.raises(NetworkError):
        gateway.update({'id': 'x', 'language': 'us'})

    notices = []
    directory = LessonDirectory(gateway, tree, language='us', role='admin',
                                notifier=lambda level, title, message='': notices.append(level))
    directory.toggle_mark('a')
    assert directory.commit_delete() is False
    assert directory.loading is False
    assert directory.marked == {'a'}
    assert directory.commit_delete() is False
    assert notices == ['error', 'error']
