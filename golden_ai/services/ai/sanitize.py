"""
Response sanitization for model output.

Reasoning models (DeepSeek R1, QwQ, ...) served through OpenAI-compatible
endpoints embed their chain of thought inline as ``<think>...</think>``.
That text is not meant for readers and must be removed before the answer is
shown, cached or parsed.
"""

import re

# Complete reasoning blocks, non-greedy so text between two blocks survives
THINK_BLOCK_REGEX = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)

# Generation cut off inside a reasoning block: drop everything after the tag
UNCLOSED_THINK_REGEX = re.compile(r"<think>.*", re.IGNORECASE | re.DOTALL)


def strip_thinking_tags(content: str) -> str:
    """Remove thinking segments and surrounding whitespace.

    Args:
        content: Raw model output

    Returns:
        The user-facing part of the answer, possibly empty
    """
    result = THINK_BLOCK_REGEX.sub("", content)
    result = UNCLOSED_THINK_REGEX.sub("", result)
    return result.strip()
