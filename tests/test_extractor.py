"""Test balanced extraction of complete JSON objects."""

from feedback_stream import extract_complete_objects
from feedback_stream.extractor import feedback_array_section, outermost_object


def test_quoted_brace_is_inert_and_trailing_object_deferred():
    text = '{"a": "{not a brace}"} {"b": 1'
    assert extract_complete_objects(text) == ['{"a": "{not a brace}"}']


def test_multiple_objects_in_order():
    text = '{"a": 1}, {"b": 2},{"c": 3}'
    assert extract_complete_objects(text) == ['{"a": 1}', '{"b": 2}', '{"c": 3}']


def test_nested_objects_not_extracted_separately():
    text = '{"a": {"b": {"c": 1}}} {"d": 2}'
    assert extract_complete_objects(text) == ['{"a": {"b": {"c": 1}}}', '{"d": 2}']


def test_escaped_quote_does_not_end_string():
    text = r'{"a": "say \"}\" now"} {"b": '
    assert extract_complete_objects(text) == [r'{"a": "say \"}\" now"}']


def test_escaped_backslash_before_quote():
    text = r'{"a": "path\\"} {"b": 2}'
    assert extract_complete_objects(text) == [r'{"a": "path\\"}', '{"b": 2}']


def test_stray_closing_brace_ignored():
    assert extract_complete_objects('} {"a": 1}') == ['{"a": 1}']


def test_no_objects():
    assert extract_complete_objects("") == []
    assert extract_complete_objects('{"a": ') == []


def test_growing_buffer_prefix_is_stable():
    full = '{"x": 1}, {"y": "}"}, {"z": [1, 2]}'
    previous = []
    for end in range(len(full) + 1):
        current = extract_complete_objects(full[:end])
        assert current[:len(previous)] == previous
        previous = current
    assert len(previous) == 3


def test_feedback_section_open_array():
    text = '{"accuracyScore": 85, "feedback": [{"type": "grammar"}, {"ty'
    assert feedback_array_section(text) == '{"type": "grammar"}, {"ty'


def test_feedback_section_stops_at_closing_bracket():
    text = '{"feedback": [{"a": "]"}, {"b": [1]}], "overallComment": "{x}"}'
    assert feedback_array_section(text) == '{"a": "]"}, {"b": [1]}'


def test_feedback_section_absent():
    assert feedback_array_section('{"accuracyScore": 85') is None


def test_outermost_object():
    assert outermost_object('Sure! {"a": {"b": 1}} hope it helps') == '{"a": {"b": 1}}'
    assert outermost_object("no braces") is None
    assert outermost_object("} {") is None
