"""Errors raised when a complete response cannot be turned into a result."""


class FeedbackParseError(Exception):
    """Base class for final-parse failures."""


class EmptyResponseError(FeedbackParseError):
    """The model produced no usable text."""


class InvalidFormatError(FeedbackParseError):
    """Text is present but is neither compact nor nested form."""
