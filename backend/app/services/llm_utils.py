"""Helpers for pulling structured JSON out of LLM text responses."""

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_OBJECT_RE = re.compile(r"\{.*}", re.DOTALL)


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract a single JSON object from an LLM response.

    Models sometimes wrap JSON in markdown fences or add a sentence of
    preamble despite being told not to. Tries, in order:

    1. The content of the first ```json (or bare ```) fence.
    2. The outermost ``{...}`` span in the text.
    3. The whole text.

    Raises:
        json.JSONDecodeError: No parseable JSON was found.
        TypeError: The JSON parsed but is not an object.
    """
    if not text or not text.strip():
        raise json.JSONDecodeError("Empty response", text or "", 0)

    fence_match = _FENCE_RE.search(text)
    if fence_match:
        candidate = fence_match.group(1)
    else:
        raw_match = _OBJECT_RE.search(text)
        candidate = raw_match.group(0) if raw_match else text

    data = json.loads(candidate)
    if not isinstance(data, dict):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
    return data
