"""Best-effort extraction of JSON from free-text model output."""

import json
from typing import Any, Optional


_DECODER = json.JSONDecoder()


def extract_json(text: str) -> Optional[Any]:
    """
    Parse the first JSON array or object found in text.

    Starts at the first '[' or '{' and decodes from there; trailing prose
    and code fences after the value are ignored.

    Returns:
        The parsed list/dict, or None when nothing parseable is found
    """
    if not text:
        return None
    starts = [i for i in (text.find("["), text.find("{")) if i >= 0]
    if not starts:
        return None
    try:
        value, _ = _DECODER.raw_decode(text, min(starts))
    except ValueError:
        return None
    return value if isinstance(value, (list, dict)) else None
