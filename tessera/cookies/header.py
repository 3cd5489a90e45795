"""
Cookie header parsing and Set-Cookie serialization.

Provides:
- parse_cookie_header: ``Cookie:`` request header -> dict of name/value
- serialize_cookie: name, value and attributes -> ``Set-Cookie`` value

Values are percent-encoded on the way out (the ``encodeURIComponent``
character set) and percent-decoded on the way in, so any string survives the
round trip regardless of cookie-value grammar.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from email.utils import formatdate
from typing import Callable, Optional, Union
from urllib.parse import quote, unquote

# RFC 6265 cookie-name (RFC 7230 token)
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

# RFC 7230 field-content (visible ASCII, space, tab, obs-text)
_FIELD_CONTENT_RE = re.compile(r"[\u0009 -~\u0080-\u00ff]+")

_SAME_SITE = {
    "strict": "Strict",
    "lax": "Lax",
    "none": "None",
}


def _decode_component(value: str) -> str:
    return unquote(value, errors="strict")


def _encode_component(value: str) -> str:
    # Same unreserved set as encodeURIComponent
    return quote(value, safe="!~*'()")


def parse_cookie_header(
    cookie_header: str,
    decode: Optional[Callable[[str], str]] = None,
) -> dict[str, str]:
    """
    Parse cookie header into dict.

    Pairs without ``=`` are skipped, surrounding double quotes are removed,
    and the first occurrence of a name wins.

    Args:
        cookie_header: Cookie header value
        decode: Value decoder (percent-decoding by default). If it raises,
            the raw value is kept.

    Returns:
        Dict of cookie name -> value
    """
    decode = decode or _decode_component
    cookies: dict[str, str] = {}

    for part in cookie_header.split(";"):
        if "=" not in part:
            continue

        name, value = part.split("=", 1)
        name = name.strip()
        value = value.strip()

        if name in cookies:
            continue

        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            value = value[1:-1]

        if "%" in value:
            try:
                value = decode(value)
            except (ValueError, UnicodeError):
                pass

        cookies[name] = value

    return cookies


def serialize_cookie(
    name: str,
    value: str,
    *,
    max_age: Optional[Union[int, float]] = None,
    domain: Optional[str] = None,
    path: Optional[str] = None,
    expires: Optional[datetime] = None,
    http_only: bool = False,
    secure: bool = False,
    same_site: Union[str, bool, None] = None,
    encode: Optional[Callable[[str], str]] = None,
) -> str:
    """
    Serialize a cookie into a ``Set-Cookie`` header value.

    Args:
        name: Cookie name
        value: Cookie value (encoded with ``encode``)
        max_age: Max age in seconds (floored to an integer)
        domain: Cookie domain
        path: Cookie path
        expires: Expiration datetime
        http_only: HttpOnly flag
        secure: Secure flag
        same_site: SameSite policy (True, "strict", "lax", "none")
        encode: Value encoder (percent-encoding by default)

    Returns:
        Set-Cookie header value

    Raises:
        ValueError: If name, value or an attribute is invalid
    """
    encode = encode or _encode_component

    if not _TOKEN_RE.fullmatch(name):
        raise ValueError(f"Invalid cookie name: {name!r}")

    encoded = encode(value)
    if encoded and not _FIELD_CONTENT_RE.fullmatch(encoded):
        raise ValueError(f"Invalid cookie value for {name!r}")

    cookie_parts = [f"{name}={encoded}"]

    if max_age is not None:
        if isinstance(max_age, bool) or not math.isfinite(max_age):
            raise ValueError(f"Invalid max_age: {max_age!r}")
        cookie_parts.append(f"Max-Age={math.floor(max_age)}")

    if domain:
        if not _FIELD_CONTENT_RE.fullmatch(domain):
            raise ValueError(f"Invalid cookie domain: {domain!r}")
        cookie_parts.append(f"Domain={domain}")

    if path:
        if not _FIELD_CONTENT_RE.fullmatch(path):
            raise ValueError(f"Invalid cookie path: {path!r}")
        cookie_parts.append(f"Path={path}")

    if expires is not None:
        if not isinstance(expires, datetime):
            raise ValueError(f"Invalid cookie expires: {expires!r}")
        # Format as HTTP date
        cookie_parts.append(f"Expires={formatdate(expires.timestamp(), usegmt=True)}")

    if http_only:
        cookie_parts.append("HttpOnly")

    if secure:
        cookie_parts.append("Secure")

    if same_site:
        if same_site is True:
            cookie_parts.append("SameSite=Strict")
        elif isinstance(same_site, str) and same_site.lower() in _SAME_SITE:
            cookie_parts.append(f"SameSite={_SAME_SITE[same_site.lower()]}")
        else:
            raise ValueError(f"Invalid cookie same_site: {same_site!r}")

    return "; ".join(cookie_parts)
