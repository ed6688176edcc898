"""
Tolerant parsing of structured model output.

Models asked for "JSON only" still wrap it in prose or code fences. Every
helper that expects an object goes through ``parse_json_object`` so the
tolerance policy lives in one place: take the span from the first ``{`` to
the last ``}``, parse it, and give up quietly if that fails.
"""

import json
import math
import re
from typing import Any

import structlog

logger = structlog.get_logger()

JSON_OBJECT_REGEX = re.compile(r"\{.*\}", re.DOTALL)


def parse_json_object(text: str) -> dict[str, Any] | None:
    """Extract the first brace-delimited JSON object from model output.

    Returns:
        The parsed object, or None when no valid object is present
    """
    match = JSON_OBJECT_REGEX.search(text or "")
    if not match:
        logger.debug("ai_json_not_found", preview=(text or "")[:100])
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.debug("ai_json_parse_failed", error=str(e), preview=match.group(0)[:100])
        return None

    if not isinstance(parsed, dict):
        return None
    return parsed


def coerce_confidence(value: Any, default: float = 0.5) -> float:
    """Confidence as a float in [0, 1]; missing, zero or NaN means ``default``."""
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return default
    if not confidence or math.isnan(confidence):
        return default
    return min(max(confidence, 0.0), 1.0)


def coerce_str_list(value: Any) -> list[str]:
    """Keep only the string entries of a list-valued field."""
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int)) and str(item).strip()]
