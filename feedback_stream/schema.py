"""
Feedback Schema: Type-safe models for streamed translation feedback.

This module provides Pydantic models for the structures surfaced while an
LLM response is being parsed: individual feedback items, the terminal
result, the per-request parse cursor, and the streaming events.

Key Features:
- Type-safe validation with Pydantic
- Wire-name aliases (``type``, ``originalText``, ``startIndex``...)
- Discriminated union for streaming events
- Explicit per-request cursor instead of hidden parser state
"""

from enum import Enum
from typing import List, Dict, Any, Optional, Literal, Union, Annotated
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# Feedback Items
# =============================================================================

class FeedbackKind(str, Enum):
    """Category of a feedback item."""
    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"
    STRUCTURE = "structure"
    SPELLING = "spelling"
    SUGGESTION = "suggestion"


class Severity(str, Enum):
    """How serious the model considers an issue to be."""
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    SERIOUS = "serious"


class FeedbackItem(BaseModel):
    """
    A single, fully formed piece of feedback.

    Accepts both the camelCase names models emit and snake_case names.
    Requires a kind and at least one of ``suggestion`` / ``explanation``.

    Example:
        >>> item = FeedbackItem.model_validate(
        ...     {"type": "Spelling", "suggestion": "receive"}
        ... )
        >>> item.kind
        <FeedbackKind.SPELLING: 'spelling'>
        >>> item.model_dump(by_alias=True)["type"]
        'spelling'
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: FeedbackKind = Field(
        ...,
        validation_alias=AliasChoices("type", "kind"),
        serialization_alias="type",
    )
    original_text: str = Field(
        "",
        validation_alias=AliasChoices("originalText", "original_text"),
        serialization_alias="originalText",
    )
    suggestion: str = ""
    explanation: str = ""
    start_index: int = Field(
        0,
        validation_alias=AliasChoices("startIndex", "start_index"),
        serialization_alias="startIndex",
    )
    end_index: int = Field(
        0,
        validation_alias=AliasChoices("endIndex", "end_index"),
        serialization_alias="endIndex",
    )
    severity: Optional[Severity] = None

    @model_validator(mode="before")
    @classmethod
    def require_advice(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("suggestion") is None and data.get("explanation") is None:
            raise ValueError("feedback item needs a suggestion or an explanation")
        return data

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("original_text", "suggestion", "explanation", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("start_index", "end_index", mode="before")
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("severity", mode="before")
    @classmethod
    def lenient_severity(cls, v: Any) -> Any:
        # Unknown severities are dropped rather than rejecting the item
        if isinstance(v, str) and v.strip().lower() in {s.value for s in Severity}:
            return v.strip().lower()
        return None


class FinalResult(BaseModel):
    """The complete, authoritative analysis of one response."""
    model_config = ConfigDict(populate_by_name=True)

    accuracy_score: Union[int, float] = Field(
        0,
        validation_alias=AliasChoices("accuracyScore", "accuracy_score"),
        serialization_alias="accuracyScore",
    )
    feedback: List[FeedbackItem] = Field(default_factory=list)
    overall_comment: str = Field(
        "",
        validation_alias=AliasChoices("overallComment", "overall_comment"),
        serialization_alias="overallComment",
    )


# =============================================================================
# Parse Cursor
# =============================================================================

class ParseState(BaseModel):
    """
    Per-request cursor that prevents duplicate event emission.

    Create one per in-flight request and discard it once the request has
    completed or failed. Never share an instance between requests.
    """
    last_emitted_score: Optional[Union[int, float]] = None
    emitted_feedback_count: int = 0

    def record_score(self, value: Union[int, float]) -> bool:
        """Store ``value`` and return True if it differs from the last one."""
        if self.last_emitted_score is not None and self.last_emitted_score == value:
            return False
        self.last_emitted_score = value
        return True

    def advance_feedback(self, position: int) -> None:
        """Move the feedback watermark forward; it never moves back."""
        self.emitted_feedback_count = max(self.emitted_feedback_count, position)


# =============================================================================
# Streaming Events
# =============================================================================

class ScoreEvent(BaseModel):
    """Event emitted when a (new) accuracy score is seen."""
    event: Literal["score"] = "score"
    value: Union[int, float] = Field(..., description="Accuracy score, 0-100")


class FeedbackEvent(BaseModel):
    """Event emitted for each newly completed feedback item."""
    event: Literal["feedback"] = "feedback"
    item: FeedbackItem


class CompleteEvent(BaseModel):
    """Event emitted once the stream has ended and the final parse succeeded."""
    event: Literal["complete"] = "complete"
    result: FinalResult


class ErrorEvent(BaseModel):
    """Event emitted when the stream fails as a whole."""
    event: Literal["error"] = "error"
    message: str


# Union type for all streaming events
StreamEvent = Annotated[
    Union[ScoreEvent, FeedbackEvent, CompleteEvent, ErrorEvent],
    Field(discriminator="event")
]


def event_to_dict(event: Union[ScoreEvent, FeedbackEvent, CompleteEvent, ErrorEvent]) -> Dict[str, Any]:
    """Serialize an event with the wire field names, ready for a UI channel."""
    return event.model_dump(by_alias=True, mode="json")
