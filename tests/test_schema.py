"""Test feedback models and the parse cursor."""

import pytest
from pydantic import TypeAdapter, ValidationError

from feedback_stream import (
    FeedbackItem,
    FeedbackKind,
    ParseState,
    ScoreEvent,
    Severity,
    StreamEvent,
    event_to_dict,
)
from feedback_stream.schema import FeedbackEvent


def test_feedback_item_from_wire_names():
    item = FeedbackItem.model_validate({
        "type": "Vocabulary",
        "severity": "Moderate",
        "originalText": "big",
        "suggestion": "enormous",
        "explanation": "stronger",
        "startIndex": 3,
        "endIndex": 6,
    })
    assert item.kind == FeedbackKind.VOCABULARY
    assert item.severity == Severity.MODERATE
    assert item.original_text == "big"
    assert (item.start_index, item.end_index) == (3, 6)


def test_feedback_item_accepts_kind_key():
    item = FeedbackItem.model_validate({"kind": "structure", "explanation": "reorder"})
    assert item.kind == FeedbackKind.STRUCTURE
    assert item.suggestion == ""


def test_feedback_item_requires_advice():
    with pytest.raises(ValidationError):
        FeedbackItem.model_validate({"type": "grammar", "originalText": "x"})


def test_feedback_item_requires_non_null_advice():
    with pytest.raises(ValidationError):
        FeedbackItem.model_validate({"type": "grammar", "suggestion": None})
    with pytest.raises(ValidationError):
        FeedbackItem.model_validate({"type": "grammar", "suggestion": None, "explanation": None})


def test_feedback_item_rejects_unknown_kind():
    with pytest.raises(ValidationError):
        FeedbackItem.model_validate({"type": "tense", "suggestion": "x"})


def test_feedback_item_nulls_and_unknown_severity():
    item = FeedbackItem.model_validate({
        "type": "grammar",
        "suggestion": None,
        "explanation": "why",
        "startIndex": None,
        "severity": "catastrophic",
    })
    assert item.suggestion == ""
    assert item.start_index == 0
    assert item.severity is None


def test_feedback_item_is_immutable():
    item = FeedbackItem(kind=FeedbackKind.GRAMMAR, suggestion="x")
    with pytest.raises(ValidationError):
        item.suggestion = "y"


def test_record_score():
    state = ParseState()
    assert state.record_score(80)
    assert not state.record_score(80)
    assert state.record_score(0)
    assert state.last_emitted_score == 0


def test_advance_feedback_is_monotonic():
    state = ParseState()
    state.advance_feedback(3)
    state.advance_feedback(1)
    assert state.emitted_feedback_count == 3


def test_event_to_dict_uses_wire_names():
    item = FeedbackItem.model_validate({"type": "spelling", "suggestion": "receive"})
    data = event_to_dict(FeedbackEvent(item=item))
    assert data["event"] == "feedback"
    assert data["item"]["type"] == "spelling"
    assert data["item"]["originalText"] == ""


def test_stream_event_discriminator():
    adapter = TypeAdapter(StreamEvent)
    event = adapter.validate_python({"event": "score", "value": 42})
    assert isinstance(event, ScoreEvent)
    assert event.value == 42
