"""
Model reply parsing.

Gemini is asked for bare JSON but often wraps it in markdown fences or
adds prose around it. We strip fences, try a straight parse, then fall
back to the object that opens at the first ``{``.
"""

import json
import re
from typing import Any, Dict, Optional

from app.utils.exceptions import AIResponseParseError
from app.utils.logger import get_logger

logger = get_logger(__name__)

RAW_RESPONSE_EXCERPT_LENGTH = 1000

_CODE_FENCE = re.compile(r"```[a-zA-Z]*\n?|\n?```")


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE.sub("", text).strip()


def find_first_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Decode the JSON object that opens at the first ``{``.

    Trailing text after the object is ignored. Later ``{`` positions are
    never tried: an inner object is not the résumé.
    """
    start = text.find("{")
    if start == -1:
        return None
    try:
        value, _ = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def parse_model_reply(reply: str) -> Dict[str, Any]:
    """
    Extract the JSON object from a model reply.

    Raises:
        AIResponseParseError: no JSON object could be recovered
    """
    text = strip_code_fences(reply)
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
        details = f"Expected a JSON object, got {type(parsed).__name__}"
    except json.JSONDecodeError as e:
        details = str(e)

    logger.warning(f"[ResponseParser] JSON parsing error: {details}")
    if "{" not in text:
        raise AIResponseParseError(
            "Failed to parse AI response - no valid JSON found",
            raw_response=text[:RAW_RESPONSE_EXCERPT_LENGTH],
            details=details,
        )

    recovered = find_first_json_object(text)
    if recovered is None:
        logger.error(f"[ResponseParser] Raw text that failed to parse: {text[:RAW_RESPONSE_EXCERPT_LENGTH]}")
        raise AIResponseParseError(
            "Failed to parse AI response",
            raw_response=text[:RAW_RESPONSE_EXCERPT_LENGTH],
            details=details,
        )
    return recovered
