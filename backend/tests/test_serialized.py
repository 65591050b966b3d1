import pytest

from nuredu.errors import ParseError
from nuredu.gateway import LessonGateway
from nuredu.lesson_form import LessonForm
from nuredu.utils.serialized import dump_list, load_list


@pytest.mark.parametrize('values', [
    [],
    ['Laptop'],
    ['Arduino kit', 'USB cable', 'Breadboard'],
    ['say "hi"', 'back\\slash', 'comma, bracket ]', 'Кирилиця', 'line\nbreak'],
])
def test_payload_then_read_reproduces_lists(tree, values):
    form = LessonForm(tree)
    form.lesson_equipment = list(values)
    form.video_links = list(values)
    form.presentation_links = list(values)
    form.additional_resources = list(values)
    payload = form.to_persistence_payload()
    row = {'id': 'x', **payload.model_dump(by_alias=True)}
    record = LessonGateway.decode_row(row)
    assert record.lesson_equipment == values
    assert record.video_links == values
    assert record.presentation_links == values
    assert record.additional_resources == values


def test_empty_list_serializes_to_empty_array_token():
    assert dump_list([]) == '[]'
    assert dump_list(None) == '[]'


def test_blank_or_missing_reads_as_empty():
    assert load_list(None) == []
    assert load_list('') == []
    assert load_list('  ') == []


@pytest.mark.parametrize('raw', ['not json', '{"a": 1}', '[1, 2]', '"text"', '[\"a\"'])
def test_malformed_values_raise_parse_error(raw):
    with pytest.raises(ParseError) as exc:
        load_list(raw, field='videoLinks')
    assert exc.value.field == 'videoLinks'
    assert exc.value.raw == raw
