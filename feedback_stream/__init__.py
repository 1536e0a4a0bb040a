"""Incremental parsing of streamed LLM translation feedback."""

from .detector import END_MARKER, looks_like_compact_form
from .exceptions import EmptyResponseError, FeedbackParseError, InvalidFormatError
from .extractor import extract_complete_objects
from .final_parser import parse_final
from .incremental_parser import IncrementalFeedbackParser, feed
from .sanitizer import sanitize, strip_markdown_fences
from .schema import (
    CompleteEvent,
    ErrorEvent,
    FeedbackEvent,
    FeedbackItem,
    FeedbackKind,
    FinalResult,
    ParseState,
    ScoreEvent,
    Severity,
    StreamEvent,
    event_to_dict,
)
from .streaming_handler import StreamingHandler, stream_feedback

__all__ = [
    "END_MARKER",
    "looks_like_compact_form",
    "FeedbackParseError",
    "EmptyResponseError",
    "InvalidFormatError",
    "extract_complete_objects",
    "parse_final",
    "feed",
    "IncrementalFeedbackParser",
    "sanitize",
    "strip_markdown_fences",
    "FeedbackKind",
    "Severity",
    "FeedbackItem",
    "FinalResult",
    "ParseState",
    "ScoreEvent",
    "FeedbackEvent",
    "CompleteEvent",
    "ErrorEvent",
    "StreamEvent",
    "event_to_dict",
    "StreamingHandler",
    "stream_feedback",
]
