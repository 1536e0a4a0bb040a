"""Test compact vs nested form detection."""

from feedback_stream import looks_like_compact_form
from feedback_stream.detector import content_lines, is_score_line


def test_compact_form_detected():
    text = '{"accuracyScore": 85}\n{"type": "grammar", "suggestion": "x", "explanation": "y"}'
    assert looks_like_compact_form(text)


def test_nested_form_detected():
    assert not looks_like_compact_form('{"accuracyScore": 85, "feedback": [')


def test_score_line_alone_is_compact():
    assert looks_like_compact_form('{"accuracyScore": 85}')


def test_incomplete_score_line_is_not_compact():
    assert not looks_like_compact_form('{"accuracyScore": 8')


def test_first_line_with_feedback_is_nested():
    text = '{"type": "grammar", "suggestion": "x"}\n{"accuracyScore": 85}'
    assert not looks_like_compact_form(text)


def test_leading_blank_lines_ignored():
    assert looks_like_compact_form('\n\n   {"accuracyScore":100}  \n')


def test_pretty_printed_object_is_nested():
    assert not looks_like_compact_form('{\n  "accuracyScore": 85,\n  "feedback": []\n}')


def test_empty_text_is_nested():
    assert not looks_like_compact_form("")


def test_score_line_rejects_non_integer():
    assert not is_score_line('{"accuracyScore": "85"}')
    assert not is_score_line('{"accuracyScore": 85.5}')
    assert not is_score_line('{"accuracyScore": 007}')


def test_content_lines_drop_end_marker():
    assert content_lines('a\n\n  b  \n[END]\n') == ["a", "b"]
