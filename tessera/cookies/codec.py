"""
Cookie value codec.

Turns any JSON value into an ASCII string that is safe to put in a cookie,
and back again. The wire format is base64 over the UTF-8 bytes of compact
JSON, which is byte-for-byte what browsers produce for
``btoa(unescape(encodeURIComponent(JSON.stringify(value))))``: the percent
escapes of ``encodeURIComponent`` are collapsed back into single bytes before
the base64 step, so the two forms are interchangeable.

Encoding is strict. Anything that would not come back unchanged from
:func:`decode` (non-string dict keys, tuples, NaN, lone surrogates) is
rejected instead of being coerced.

Decoding is total. A corrupted, truncated or foreign value decodes to ``{}``
instead of raising, so a bad cookie degrades to an empty session.
"""

from __future__ import annotations

import binascii
import json
import logging
import math
from base64 import b64decode, b64encode
from typing import Any

from .faults import CookieEncodeFault

logger = logging.getLogger("tessera.cookies")


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _parse_float(text: str) -> float:
    # 1e999 parses as inf, which encode() would refuse later
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def _check_lossless(value: Any, seen: set[int]) -> None:
    """
    Reject containers that JSON would silently reshape.

    Raises:
        TypeError: Non-string dict key or tuple
        ValueError: Circular reference
    """
    if isinstance(value, tuple):
        raise TypeError("tuples would decode as lists")

    if not isinstance(value, (dict, list)):
        return

    if id(value) in seen:
        raise ValueError("Circular reference detected")
    seen.add(id(value))

    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"keys must be str, not {type(key).__name__}")
            _check_lossless(item, seen)
    else:
        for item in value:
            _check_lossless(item, seen)

    seen.discard(id(value))


def encode(value: Any) -> str:
    """
    Encode a JSON-serializable value into a cookie-safe string.

    Args:
        value: str, int, float, bool, None, or lists/str-keyed dicts of those

    Returns:
        Base64 (standard alphabet, padded) ASCII string

    Raises:
        CookieEncodeFault: If value has no exact JSON representation
    """
    try:
        _check_lossless(value, set())
        text = json.dumps(
            value,
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
        raw = text.encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError, RecursionError) as e:
        raise CookieEncodeFault(type(value).__name__, str(e)) from e

    return b64encode(raw).decode("ascii")


def decode(value: str) -> Any:
    """
    Decode a string produced by :func:`encode`.

    Args:
        value: Encoded cookie value

    Returns:
        The decoded JSON value, or ``{}`` if any stage fails
    """
    try:
        raw = b64decode(_pad(value.strip()), validate=True)
        result = json.loads(
            raw.decode("utf-8"),
            parse_float=_parse_float,
            parse_constant=_reject_constant,
        )
        # "\ud800" escapes load as lone surrogates
        json.dumps(result, ensure_ascii=False).encode("utf-8")
        return result
    except (binascii.Error, UnicodeError, ValueError, TypeError, AttributeError, RecursionError) as e:
        logger.debug("Discarding undecodable cookie value: %s", e)
        return {}


def _pad(value: str) -> str:
    """Restore base64 padding stripped by some clients."""
    return value + "=" * (-len(value) % 4)
