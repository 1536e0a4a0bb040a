"""
Balanced Extractor: Finds syntactically complete JSON objects in text.

Objects are located by brace depth, with string and escape awareness so
that braces and brackets inside quoted values are inert. Incomplete
trailing objects are ignored, which is what lets a growing buffer be
re-scanned on every chunk: an object appears in the output only once it
has fully arrived.
"""

import re
from typing import List, Optional


FEEDBACK_ARRAY_PATTERN = re.compile(r'"feedback"\s*:\s*\[')


def extract_complete_objects(text: str) -> List[str]:
    """
    Return every complete top-level ``{...}`` substring, in closing order.

    Stateless: the full set of currently complete objects is returned on
    every call. Nested objects are part of their enclosing object and are
    not returned on their own.

    Args:
        text: Text that may contain zero or more JSON objects

    Returns:
        List of object substrings

    Example:
        >>> extract_complete_objects('{"a": "{not a brace}"} {"b": 1')
        ['{"a": "{not a brace}"}']
    """
    objects = []
    depth = 0
    start = 0
    in_string = False
    escaped = False

    for idx, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            if depth == 0:
                start = idx
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                objects.append(text[start:idx + 1])

    return objects


def feedback_array_section(text: str) -> Optional[str]:
    """
    Return the body of the ``feedback`` array, as far as it has arrived.

    The body runs from just after ``[`` to the matching ``]``, or to the end
    of the text while the array is still open. Returns None if the array
    has not started yet.

    Example:
        >>> feedback_array_section('{"feedback": [{"a": "]"}], "x": 1}')
        '{"a": "]"}'
    """
    match = FEEDBACK_ARRAY_PATTERN.search(text)
    if not match:
        return None

    body_start = match.end()
    depth = 0
    in_string = False
    escaped = False

    for idx in range(body_start, len(text)):
        char = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in "[{":
            depth += 1
        elif char in "]}":
            if depth == 0:
                return text[body_start:idx]
            depth -= 1

    return text[body_start:]


def outermost_object(text: str) -> Optional[str]:
    """Slice from the first ``{`` to the last ``}``, or None if there is none."""
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last < first:
        return None
    return text[first:last + 1]
