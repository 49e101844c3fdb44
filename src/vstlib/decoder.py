"""Decode double-encoded vstorage leaf values into pretty JSON.

vstorage stores a JSON document serialized as a JSON string, escaped once
more and marked with ``#{``/``#[`` sentinels. Cleaning is a fixed table of
literal substitutions applied in a single left-to-right scan: at each
position the first pattern in table order that matches wins, and replaced
text is never rescanned in the same pass. The scan runs twice to undo one
level of nesting. The cleaned text is validated as JSON and then re-indented
token by token, so numbers and string escapes keep their original spelling.
"""

from __future__ import annotations

import enum
import json
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import DecodeFailed

logger = logging.getLogger(__name__)


CLEANUP_PASSES = 2

# Order matters where patterns can match at the same position.
_SUBSTITUTIONS: Tuple[Tuple[str, str], ...] = (
    ("\\\\", ""),
    ('"#{', "{"),
    ('"{', "{"),
    ('"#[', "["),
    ('}"', "}"),
    (']"', "]"),
    ('\\"', '"'),
)

_LOOKUP = dict(_SUBSTITUTIONS)
_PATTERN = re.compile("|".join(re.escape(old) for old, _ in _SUBSTITUTIONS))

_WHITESPACE = " \t\r\n"
_CLOSERS = {"{": "}", "[": "]"}


class ValueStatus(enum.Enum):
    OK = "ok"
    FETCH_ERROR = "fetch_error"
    DECODE_ERROR = "decode_error"


@dataclass(frozen=True)
class DecodedValue:
    """What the data pane shows for one leaf; replaced wholesale, never patched."""

    path: str
    text: str
    status: ValueStatus = ValueStatus.OK
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ValueStatus.OK


def cleanup_pass(text: str) -> str:
    """Apply the substitution table once."""
    return _PATTERN.sub(lambda m: _LOOKUP[m.group(0)], text)


def clean_value(raw: str, passes: int = CLEANUP_PASSES) -> str:
    cleaned = raw
    for _ in range(passes):
        cleaned = cleanup_pass(cleaned)
    return cleaned


def _reject_constant(token: str) -> None:
    raise ValueError(f"{token} is not a valid JSON value")


def _string_end(text: str, start: int) -> int:
    """Index just past the string literal opening at ``start``."""
    i = start + 1
    while text[i] != '"':
        i += 2 if text[i] == "\\" else 1
    return i + 1


def reindent(text: str, indent: str = "  ") -> str:
    """Re-indent already validated JSON, copying every token verbatim.

    Numbers and string escapes keep their original spelling; only
    whitespace between tokens changes.
    """
    out = []
    depth = 0
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch in _WHITESPACE:
            i += 1
            continue
        if ch == '"':
            end = _string_end(text, i)
            out.append(text[i:end])
            i = end
            continue
        if ch in _CLOSERS:
            j = i + 1
            while j < n and text[j] in _WHITESPACE:
                j += 1
            if j < n and text[j] == _CLOSERS[ch]:
                # empty container stays on one line
                out.append(ch + text[j])
                i = j + 1
                continue
            depth += 1
            out.append(ch + "\n" + indent * depth)
        elif ch in "}]":
            depth -= 1
            out.append("\n" + indent * depth + ch)
        elif ch == ",":
            out.append(",\n" + indent * depth)
        elif ch == ":":
            out.append(": ")
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def decode_value(raw: str) -> str:
    """Clean ``raw`` and pretty-print it with 2-space indentation.

    Raises DecodeFailed carrying the cleaned text when the result is not
    valid JSON. NaN and Infinity are rejected.
    """
    cleaned = clean_value(raw)
    try:
        json.loads(cleaned, parse_constant=_reject_constant)
    except ValueError as e:
        logger.debug("Cleaned leaf value is not valid JSON: %s", e)
        raise DecodeFailed(f"failed to pretty-print JSON: {e}", cleaned=cleaned) from e
    return reindent(cleaned)


def decode_leaf(path: str, raw: str) -> DecodedValue:
    """Decode a leaf body into a DecodedValue, falling back to the cleaned text."""
    try:
        return DecodedValue(path=path, text=decode_value(raw))
    except DecodeFailed as e:
        return DecodedValue(
            path=path,
            text=e.cleaned if e.cleaned is not None else raw,
            status=ValueStatus.DECODE_ERROR,
            error=str(e),
        )
