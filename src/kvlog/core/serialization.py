"""
Key-value encoders for log records.

Two line formats are supported, both serialising keys in the order presented:

- logfmt: ``key=value`` pairs separated by single spaces. Values containing
  whitespace, control characters, ``=`` or ``"`` are double-quoted with
  JSON-style escapes. The bare string ``null`` is quoted so it stays distinct
  from a None value.
- JSON: one object per record, encoded with orjson. Duplicate keys keep the
  position of their first occurrence and the value of their last.

Neither encoder appends a newline; the format loggers do that.
"""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Sequence

import orjson

from .errors import EncodingError
from .logger import MISSING_VALUE

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def format_time(value: datetime) -> str:
    """Render a datetime as RFC 3339, ``Z`` for UTC, trailing zeros trimmed."""
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is None:
        return text
    total = int(offset.total_seconds())
    if total == 0:
        return text + "Z"
    sign = "+" if total > 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _key_text(key: Any) -> str:
    if type(key) is str:
        return key
    if key is None:
        raise EncodingError("log key must not be None")
    return _stringify(key)


def _stringify(value: Any) -> str:
    try:
        return str(value)
    except Exception as exc:
        raise EncodingError(
            f"cannot render {type(value).__name__} as text",
            cause=exc,
        ) from exc


def _value_text(value: Any) -> str | None:
    """Text form of a logfmt value; None means the literal ``null``."""
    if isinstance(value, Enum):
        value = value.value
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return repr(int(value))
    if isinstance(value, float):
        return repr(float(value))
    if isinstance(value, datetime):
        return format_time(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return _stringify(value)


def _is_special(ch: str) -> bool:
    # Space, C0 controls, separators and the Unicode replacement character
    return ch <= " " or ch == "=" or ch == '"' or ch == "\ufffd"


def _quote(text: str) -> str:
    out = ['"']
    for ch in text:
        esc = _ESCAPES.get(ch)
        if esc is not None:
            out.append(esc)
        elif ch < " ":
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def encode_logfmt(keyvals: Sequence[Any]) -> bytes:
    """Encode an ordered key-value sequence as one logfmt record.

    Raises:
        EncodingError: For None keys, empty keys, or keys containing spaces,
            control characters, ``=`` or ``"``
    """
    parts: list[str] = []
    n = len(keyvals)
    for i in range(0, n, 2):
        key = _key_text(keyvals[i])
        if not key or any(_is_special(ch) for ch in key):
            raise EncodingError(f"invalid logfmt key: {key!r}")
        value = keyvals[i + 1] if i + 1 < n else MISSING_VALUE
        text = _value_text(value)
        if text is None:
            parts.append(f"{key}=null")
        elif text == "null" or any(_is_special(ch) for ch in text):
            parts.append(f"{key}={_quote(text)}")
        else:
            parts.append(f"{key}={text}")
    return " ".join(parts).encode("utf-8")


def _json_default(obj: Any) -> Any:
    """Default serializer hook for types orjson does not handle natively."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj).decode("utf-8", errors="replace")
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    return _stringify(obj)


def _json_value(value: Any) -> Any:
    # orjson would render aware datetimes with "+00:00"; keep one time format
    if isinstance(value, datetime):
        return format_time(value)
    return value


def encode_json(keyvals: Sequence[Any]) -> bytes:
    """Encode an ordered key-value sequence as one JSON object.

    Raises:
        EncodingError: For None keys or values orjson rejects (e.g. integers
            wider than 64 bits)
    """
    payload: dict[str, Any] = {}
    n = len(keyvals)
    for i in range(0, n, 2):
        key = _key_text(keyvals[i])
        value = keyvals[i + 1] if i + 1 < n else MISSING_VALUE
        payload[key] = _json_value(value)
    try:
        return orjson.dumps(payload, default=_json_default)
    except (TypeError, orjson.JSONEncodeError) as exc:
        raise EncodingError("JSON serialization failed", cause=exc) from exc


__all__ = [
    "format_time",
    "encode_logfmt",
    "encode_json",
]
