import json
import re
from typing import Any, Dict, Optional

from permit_buddy.utils.logging import get_logger

LOGGER = get_logger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block (```json ... ```)."""
    return _FENCE_PATTERN.sub("", text.strip()).strip()


def parse_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Parse model output that is expected to be a single JSON object.

    Args:
        text: Raw model output, optionally wrapped in a markdown code block

    Returns:
        The decoded object

    Raises:
        ValueError: If the text is empty, is not valid JSON, or decodes to
            something other than an object
    """
    if not text or not text.strip():
        raise ValueError("No content returned from model")

    try:
        parsed = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        LOGGER.warning(f"Model output is not valid JSON: {e}")
        raise ValueError(f"Failed to parse JSON from model: {e.msg}") from e

    if not isinstance(parsed, dict):
        raise ValueError("Model response was not an object")

    return parsed
