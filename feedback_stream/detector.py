"""
Format Detector: Decides between compact (line-delimited) and nested form.

Compact form opens with a standalone score object on its own line:

    {"accuracyScore": 85}
    {"type": "grammar", "suggestion": "...", "explanation": "..."}
    [END]

Anything else is treated as nested form, a single JSON object whose
``feedback`` array fills in over time.
"""

import re
from typing import List


END_MARKER = "[END]"

SCORE_LINE_PATTERN = re.compile(r'^\{\s*"accuracyScore"\s*:\s*(?:0|[1-9]\d*)\s*\}$')


def content_lines(text: str) -> List[str]:
    """Split text into trimmed, non-empty lines, dropping the end marker."""
    lines = []
    for line in text.splitlines():
        line = line.strip()
        if line and line != END_MARKER:
            lines.append(line)
    return lines


def is_score_line(line: str) -> bool:
    """True if ``line`` is exactly a standalone score object."""
    return bool(SCORE_LINE_PATTERN.match(line.strip()))


def looks_like_compact_form(sanitized_text: str) -> bool:
    """
    Check whether the first logical line is a standalone score object.

    Cheap enough to re-run on every chunk, so the answer is never cached.

    Example:
        >>> looks_like_compact_form('{"accuracyScore": 85}\\n{"type": "grammar"')
        True
        >>> looks_like_compact_form('{"accuracyScore": 85, "feedback": [')
        False
    """
    lines = content_lines(sanitized_text)
    return bool(lines) and is_score_line(lines[0])
