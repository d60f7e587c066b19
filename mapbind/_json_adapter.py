"""mapbind JSON adapter — bind JSON text to Serializable classes and back.

``from_json`` is deliberately stricter than ``json.loads``:

    - input bytes must be UTF-8, with no byte-order mark
    - duplicate object keys are rejected (json.loads keeps the last one)
    - NaN / Infinity / -Infinity are rejected
    - the root must be an object

Everything after parsing is plain ``from_map``, so all the field rules
(casts, defaults, Strict, Unmapped) apply unchanged.

``to_json`` dumps ``to_map()``.  Values JSON has no type for are rendered
as strings: datetimes and dates in ISO 8601, Decimals via str().
"""

from __future__ import annotations

import datetime
import decimal
import json
import re
from typing import Any, Type, TypeVar, Union

from ._errors import DecodeError

T = TypeVar("T")

# Leading JSON whitespace, for BOM detection.
_WS = re.compile(rb"^[\x20\x09\x0A\x0D]*")


def _reject_constant(token: str) -> Any:
    raise ValueError("JSON constant {} not allowed".format(token))


def json_strict_parse(raw: Union[bytes, str], klass: str = "JSON") -> Any:
    """Parse JSON text, rejecting BOMs, duplicate keys and non-finite numbers."""
    if isinstance(raw, (bytes, bytearray)):
        m = _WS.match(raw)
        start = m.end() if m else 0
        if raw[start:start + 3] == b"\xef\xbb\xbf":
            raise DecodeError("UTF-8 BOM rejected", klass)
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("invalid UTF-8 in JSON input", klass) from exc
    else:
        text = raw
        if text.lstrip(" \t\r\n").startswith("\ufeff"):
            raise DecodeError("UTF-8 BOM rejected", klass)

    def pairs_hook(pairs: list) -> dict:
        result: dict = {}
        for key, value in pairs:
            if key in result:
                raise DecodeError("duplicate key in JSON", klass, key)
            result[key] = value
        return result

    try:
        return json.loads(text, object_pairs_hook=pairs_hook,
                          parse_constant=_reject_constant)
    except DecodeError:
        raise
    except ValueError as exc:  # json.JSONDecodeError is a ValueError
        raise DecodeError("JSON parse error: {}".format(exc), klass) from exc


def from_json(cls: Type[T], raw: Union[bytes, str]) -> T:
    """Parse ``raw`` and bind it with ``cls.from_map``."""
    obj = json_strict_parse(raw, cls.__name__)
    if not isinstance(obj, dict):
        raise DecodeError(
            "JSON root must be an object, got {}".format(type(obj).__name__),
            cls.__name__)
    return cls.from_map(obj)  # type: ignore[attr-defined]


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, decimal.Decimal):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError("{} is not JSON serializable".format(type(value).__name__))


def to_json(obj: Any, **kwargs: Any) -> str:
    """``json.dumps(obj.to_map())``; extra keyword arguments go to json.dumps."""
    kwargs.setdefault("default", _json_default)
    return json.dumps(obj.to_map(), **kwargs)
