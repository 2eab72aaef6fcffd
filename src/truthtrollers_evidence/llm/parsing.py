"""Helpers for turning model output into JSON objects."""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

JSON_ONLY_SUFFIX = "\n\nReturn ONLY valid JSON. JSON shape hint: "


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse model output into a dict.

    Returns ``{}`` when the text is empty, is not valid JSON, or is valid
    JSON but not an object. Validation of the object's shape is left to
    the caller.
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        return {}
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning(f"Failed to parse LLM JSON, got: {cleaned[:200]}")
        return {}
    if not isinstance(parsed, dict):
        logger.warning("LLM JSON response is not an object, ignoring")
        return {}
    return parsed
