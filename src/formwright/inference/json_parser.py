"""Tolerant JSON-object extraction from completion text."""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Optional

from formwright.exceptions import MalformedOutputError

log = logging.getLogger(__name__)

_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def _reject_constant(name: str) -> None:
    """``NaN``/``Infinity``/``-Infinity`` literals decode as null."""
    return None


def _finite_float(text: str) -> Optional[float]:
    """Float literals that overflow to infinity (``1e999``) decode as null."""
    value = float(text)
    return value if math.isfinite(value) else None


def _try_parse(s: str) -> Optional[Any]:
    """Attempt JSON parse with the trailing-comma fixup."""
    s = s.strip()
    if not s:
        return None
    try:
        return json.loads(s, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError:
        pass
    try:
        return json.loads(_TRAILING_COMMA.sub(r"\1", s), parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError:
        return None


def _fenced_blocks(content: str) -> list[str]:
    blocks: list[str] = []
    for marker in ("```json", "```"):
        start = content.find(marker)
        if start == -1:
            continue
        inner = content[start + len(marker):]
        end = inner.find("```")
        if end != -1:
            blocks.append(inner[:end])
    return blocks


def _balanced_object(content: str) -> Optional[str]:
    """First balanced ``{...}`` span, string-literal aware."""
    idx = content.find("{")
    if idx == -1:
        return None
    depth = 0
    in_string = False
    escape = False
    for i in range(idx, len(content)):
        ch = content[i]
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return content[idx : i + 1]
    return None


def extract_json_object(content: str) -> dict[str, Any]:
    """Parse a JSON object from completion text.

    Tries, in order: fenced code blocks, the whole content, and the first
    balanced ``{...}`` span. Anything that is not a JSON *object* raises
    :class:`MalformedOutputError`.
    """
    candidates = [*_fenced_blocks(content), content]
    span = _balanced_object(content)
    if span is not None:
        candidates.append(span)

    parsed_non_object = False
    for candidate in candidates:
        result = _try_parse(candidate)
        if isinstance(result, dict):
            return result
        if result is not None:
            parsed_non_object = True

    log.error(
        "Failed to parse JSON object from completion",
        extra={"response_length": len(content), "response_preview": content[:200]},
    )
    reason = "Completion was JSON but not an object" if parsed_non_object else "Completion was not valid JSON"
    raise MalformedOutputError(reason, raw_response=content)
