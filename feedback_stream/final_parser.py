"""
Final Parser: One-shot parse of a complete LLM response.

Invoked once the transport reports end-of-stream. Handles the same two
shapes as the incremental parser (compact and nested form) but produces a
single authoritative FinalResult, or raises.
"""

import json
import logging
import re
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from .detector import content_lines, is_score_line
from .exceptions import EmptyResponseError, InvalidFormatError
from .extractor import outermost_object
from .sanitizer import sanitize, strip_markdown_fences
from .schema import FeedbackItem, FinalResult

logger = logging.getLogger(__name__)


# Anything shorter cannot hold a score object, so the model produced nothing usable
MIN_VIABLE_LENGTH = 10

UNQUOTED_TYPE_PATTERN = re.compile(r'("type"\s*:\s*)([A-Za-z_]+)(\s*[,}])')

# Besides JSONDecodeError, json.loads raises ValueError past the integer digit
# limit and RecursionError on very deep nesting
UNPARSEABLE_ERRORS = (ValueError, RecursionError)


def repair_unquoted_type(line: str) -> str:
    """
    Re-quote a bare-word ``type`` value.

    Example:
        >>> repair_unquoted_type('{"type": spelling, "suggestion": "fix"}')
        '{"type": "spelling", "suggestion": "fix"}'
    """
    return UNQUOTED_TYPE_PATTERN.sub(r'\1"\2"\3', line)


def score_only(data: Any) -> Optional[Union[int, float]]:
    """Return the score if ``data`` is an object holding only ``accuracyScore``."""
    if isinstance(data, dict) and list(data) == ["accuracyScore"]:
        value = data["accuracyScore"]
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return None


def parse_final(text: str) -> FinalResult:
    """
    Parse a complete response into a FinalResult.

    Args:
        text: The full buffer accumulated for one request

    Returns:
        FinalResult built from compact or nested form

    Raises:
        EmptyResponseError: No usable text
        InvalidFormatError: Text present but neither form parses
    """
    cleaned = strip_markdown_fences(sanitize(text))
    if len(cleaned) < MIN_VIABLE_LENGTH:
        raise EmptyResponseError("The AI returned an empty response. Please try again.")

    lines = content_lines(cleaned)
    if lines and is_score_line(lines[0]):
        return _parse_compact(lines)
    return _parse_nested(cleaned)


def _parse_compact(lines: List[str]) -> FinalResult:
    score: Union[int, float] = 0
    feedback = []

    for line in lines:
        try:
            data = json.loads(repair_unquoted_type(line))
        except UNPARSEABLE_ERRORS:
            logger.debug("Skipping unparseable line: %r", line[:200])
            continue

        value = score_only(data)
        if value is not None:
            score = value
            continue

        if not isinstance(data, dict) or not ("type" in data or "kind" in data):
            continue
        try:
            feedback.append(FeedbackItem.model_validate(data))
        except ValidationError as e:
            logger.debug("Skipping invalid feedback line %r: %s", line, e)

    return FinalResult(accuracy_score=score, feedback=feedback)


def _parse_nested(text: str) -> FinalResult:
    candidate = outermost_object(text)
    if candidate is None:
        logger.warning("No JSON object found in response of %d chars", len(text))
        raise InvalidFormatError("Invalid response format - no JSON object found")

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse AI response: %s", e)
        raise InvalidFormatError(f"Invalid response format - {e.msg}") from e
    except UNPARSEABLE_ERRORS as e:
        logger.warning("Failed to parse AI response: %s", e)
        raise InvalidFormatError("Invalid response format - unparseable JSON") from e

    if not isinstance(parsed, dict):
        raise InvalidFormatError("Invalid response format - expected a JSON object")

    raw_feedback = parsed.get("feedback") or []
    if not isinstance(raw_feedback, list):
        logger.debug("Ignoring non-list feedback field: %r", raw_feedback)
        raw_feedback = []

    feedback = []
    for index, entry in enumerate(raw_feedback):
        try:
            feedback.append(FeedbackItem.model_validate(entry))
        except ValidationError as e:
            logger.debug("Skipping invalid feedback item %d: %s", index, e)

    try:
        return FinalResult(
            accuracy_score=parsed.get("accuracyScore") or 0,
            feedback=feedback,
            overall_comment=parsed.get("overallComment") or "",
        )
    except ValidationError as e:
        logger.warning("AI response has an unusable score or comment: %s", e)
        raise InvalidFormatError("Invalid response format - bad score or comment") from e
