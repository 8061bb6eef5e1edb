from __future__ import annotations

import json
import re
from typing import Any

from .groq_client import LLMResponseError

# A fence at the very start or end of the reply, e.g. "```json" ... "```"
_OUTER_FENCE_RE = re.compile(r"^\s*```(?:json)?[ \t]*\n?|\n?[ \t]*```\s*$", re.IGNORECASE)
# The first fenced block anywhere in the reply
_FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def strip_fences(text: str) -> str:
    """Remove a leading and/or trailing Markdown fence from ``text``."""
    return _OUTER_FENCE_RE.sub("", text.strip()).strip()


def extract_json(text: str) -> Any:
    """
    Parse the JSON payload of a model reply.

    The reply is first parsed with its outer fences stripped. If that fails,
    the contents of the first fenced block are parsed instead. Raises
    ``LLMResponseError`` when neither attempt yields JSON.
    """
    try:
        return json.loads(strip_fences(text))
    except json.JSONDecodeError:
        pass

    match = _FENCED_BLOCK_RE.search(text)
    if match is None:
        raise LLMResponseError("Failed to extract JSON from model response")
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise LLMResponseError("Fenced block in model response is not valid JSON") from exc
