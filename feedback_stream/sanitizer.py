"""
Text Sanitizer: Strips formatting artifacts from LLM output.

Models wrap JSON in markdown fences even when told not to, and some
backends leak chat-template control tokens into the text. Both are removed
before any format detection happens.
"""

import re
from typing import List


# Vendor chat-template markers (ChatML, Llama 3, Gemma, Mistral, GPT-2 style)
CONTROL_TOKENS: List[str] = [
    "<|im_start|>",
    "<|im_end|>",
    "<|im_sep|>",
    "<|begin_of_text|>",
    "<|end_of_text|>",
    "<|start_header_id|>",
    "<|end_header_id|>",
    "<|eot_id|>",
    "<|eom_id|>",
    "<|endoftext|>",
    "<|end|>",
    "<start_of_turn>",
    "<end_of_turn>",
    "<bos>",
    "<eos>",
    "<s>",
    "</s>",
    "[INST]",
    "[/INST]",
]

CONTROL_TOKEN_PATTERN = re.compile(
    "|".join(re.escape(token) for token in CONTROL_TOKENS),
    re.IGNORECASE,
)
OPENING_FENCE_PATTERN = re.compile(r'^```[\w+-]*[^\S\n]*(?:\n|$)')
CLOSING_FENCE_PATTERN = re.compile(r'\n?```\s*$')


def strip_markdown_fences(text: str) -> str:
    """
    Remove a wrapping markdown code fence from text.

    Only a fence that opens the (trimmed) text is treated as a wrapper; its
    closing fence is removed if it has arrived.

    Args:
        text: Raw text that may be wrapped in a fence

    Returns:
        Trimmed text with the wrapping fence removed

    Example:
        >>> strip_markdown_fences('```json\\n{"key":"value"}\\n```')
        '{"key":"value"}'
    """
    text = text.strip()
    if not text.startswith("```"):
        return text
    text = OPENING_FENCE_PATTERN.sub("", text, count=1)
    text = CLOSING_FENCE_PATTERN.sub("", text, count=1)
    return text.strip()


def sanitize(text: str) -> str:
    """
    Remove control tokens anywhere in the text, then a wrapping fence.

    Pure function; never raises.

    Example:
        >>> sanitize('<|im_start|>```json\\n{"accuracyScore": 90}\\n```<|im_end|>')
        '{"accuracyScore": 90}'
    """
    return strip_markdown_fences(CONTROL_TOKEN_PATTERN.sub("", text))
