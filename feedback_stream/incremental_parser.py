"""
Incremental Feedback Parser: Turns a growing LLM buffer into stream events.

This module handles the challenge of surfacing structured feedback from a
streaming LLM response, where text arrives in chunks of arbitrary size and
a JSON value may be split at any point.

Key Features:
- Compact (line-delimited) and nested (single object) forms
- Re-scans the whole buffer on each chunk; format boundaries do not align
  with chunk boundaries
- Explicit ParseState cursor: no score or feedback item is emitted twice
- Malformed fragments are skipped silently, never raised
"""

import json
import logging
import re
from typing import List, Union

from pydantic import ValidationError

from .detector import content_lines, looks_like_compact_form
from .exceptions import FeedbackParseError
from .extractor import extract_complete_objects, feedback_array_section
from .final_parser import UNPARSEABLE_ERRORS, parse_final, repair_unquoted_type, score_only
from .sanitizer import sanitize
from .schema import (
    CompleteEvent,
    ErrorEvent,
    FeedbackEvent,
    FeedbackItem,
    ParseState,
    ScoreEvent,
    StreamEvent,
)

logger = logging.getLogger(__name__)


# The score only counts once a delimiter proves the number is complete
NESTED_SCORE_PATTERN = re.compile(r'"accuracyScore"\s*:\s*(\d+(?:\.\d+)?)(?=[\s,}])')


def feed(buffer: str, state: ParseState) -> List[StreamEvent]:
    """
    Return the events that are new in ``buffer`` relative to ``state``.

    Call once per received chunk with the entire buffer accumulated so far.
    ``state`` is updated in place. Never emits CompleteEvent; the caller
    invokes the final parser once the transport signals end-of-stream.

    Args:
        buffer: Raw text accumulated so far for one request
        state: Cursor owned by that request

    Returns:
        List of ScoreEvent / FeedbackEvent (may be empty)

    Example:
        >>> state = ParseState()
        >>> [e.event for e in feed('{"accuracyScore": 85}\\n', state)]
        ['score']
        >>> feed('{"accuracyScore": 85}\\n', state)
        []
    """
    text = sanitize(buffer)
    if looks_like_compact_form(text):
        return _feed_compact(text, state)
    return _feed_nested(text, state)


def _feed_compact(text: str, state: ParseState) -> List[StreamEvent]:
    events: List[StreamEvent] = []
    lines = content_lines(text)

    try:
        score = score_only(json.loads(lines[0]))
    except UNPARSEABLE_ERRORS as e:
        logger.debug("Score line is not loadable: %s", e)
        score = None
    if score is not None and state.record_score(score):
        events.append(ScoreEvent(value=score))

    for position, line in enumerate(lines[1:], start=1):
        if position <= state.emitted_feedback_count:
            continue

        try:
            data = json.loads(repair_unquoted_type(line))
        except json.JSONDecodeError:
            # Most likely still arriving; retried on the next chunk
            break
        except UNPARSEABLE_ERRORS as e:
            logger.debug("Dropping complete but unloadable feedback line %d: %s", position, e)
            state.advance_feedback(position)
            continue

        value = score_only(data)
        if value is not None:
            if state.record_score(value):
                events.append(ScoreEvent(value=value))
            state.advance_feedback(position)
            continue

        try:
            item = FeedbackItem.model_validate(data)
        except ValidationError as e:
            logger.debug("Dropping complete but invalid feedback line %d: %s", position, e)
            state.advance_feedback(position)
            continue

        events.append(FeedbackEvent(item=item))
        state.advance_feedback(position)

    return events


def _feed_nested(text: str, state: ParseState) -> List[StreamEvent]:
    events: List[StreamEvent] = []

    match = NESTED_SCORE_PATTERN.search(text)
    if match:
        raw = match.group(1)
        try:
            score = float(raw) if "." in raw else int(raw)
        except ValueError as e:
            logger.debug("Score is not a usable number: %s", e)
            score = None
        if score is not None and state.record_score(score):
            events.append(ScoreEvent(value=score))

    section = feedback_array_section(text)
    if section is None:
        return events

    objects = extract_complete_objects(section)
    for index in range(state.emitted_feedback_count, len(objects)):
        # Array position is the only key, so a bad element is skipped for good
        state.advance_feedback(index + 1)
        try:
            item = FeedbackItem.model_validate(json.loads(objects[index]))
        except (ValidationError, ValueError, RecursionError) as e:
            logger.debug("Skipping feedback element %d: %s", index, e)
            continue
        events.append(FeedbackEvent(item=item))

    return events


class IncrementalFeedbackParser:
    """
    Owns the buffer and cursor for one in-flight request.

    Example:
        >>> parser = IncrementalFeedbackParser()
        >>> parser.push('{"accuracyScore": 9')
        []
        >>> [e.event for e in parser.push('0, "feedback": [')]
        ['score']
        >>> parser.push('{"type": "grammar", "suggestion": "went"}]}')[0].item.kind.value
        'grammar'
    """

    def __init__(self):
        self.buffer = ""
        self.state = ParseState()

    def push(self, chunk: str) -> List[StreamEvent]:
        """
        Append a chunk and return any events it completes.

        Args:
            chunk: Raw text chunk from the LLM stream

        Returns:
            List of new events (may be empty)
        """
        self.buffer += chunk
        return feed(self.buffer, self.state)

    def finish(self) -> Union[CompleteEvent, ErrorEvent]:
        """Run the final parser on the whole buffer at end-of-stream."""
        try:
            result = parse_final(self.buffer)
        except FeedbackParseError as e:
            logger.warning("Final parse failed after %d chars: %s", len(self.buffer), e)
            return ErrorEvent(message=str(e))
        return CompleteEvent(result=result)
