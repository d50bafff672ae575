"""
Recovery of the domain analysis JSON from the assistant's free-text answer.

The assistant is asked for bare JSON but may wrap it in a markdown fence or
put a sentence in front of it. Recovery is a pure function of the text so it
can be tested without any network call.
"""

from __future__ import annotations

import json
import re
from typing import Any

from cyclescope.core.exceptions import MalformedResponseError


REQUIRED_KEYS = ("dimension_code", "dimension_name", "indicators")

# Leading ``` with an optional language tag, and a trailing ```
_LEADING_FENCE = re.compile(r"^\s*```[a-zA-Z0-9_-]*[ \t]*\r?\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\r?\n?```\s*$")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence and trim whitespace."""
    stripped = _LEADING_FENCE.sub("", text, count=1)
    stripped = _TRAILING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def extract_json_object(text: str) -> str:
    """
    Cut the JSON object out of the answer.

    Text already starting with '{' is returned as is. Otherwise the substring
    from the first '{' to the last '}' is taken.
    """
    candidate = strip_code_fence(text)
    if candidate.startswith("{"):
        return candidate

    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponseError(
            "No JSON object found in assistant response",
            details={"preview": candidate[:200]},
        )
    return candidate[start:end + 1]


def validate_required_fields(data: dict[str, Any]) -> None:
    """Reject payloads missing the identity keys or the indicator list."""
    missing = [key for key in REQUIRED_KEYS if not data.get(key)]
    if missing:
        raise MalformedResponseError(
            f"Assistant response missing required fields: {', '.join(missing)}",
            details={"missing": missing},
        )


def recover_analysis_json(text: str | None) -> dict[str, Any]:
    """
    Recover and validate the domain analysis object from raw answer text.

    Raises:
        MalformedResponseError: if no object can be found, it does not
            parse, or required fields are absent.
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty assistant response")

    json_text = extract_json_object(text)

    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Failed to parse assistant JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Assistant JSON is a {type(data).__name__}, expected an object"
        )

    validate_required_fields(data)
    return data
