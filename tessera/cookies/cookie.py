"""
Cookie - named, signed, encoded cookie.

A Cookie knows its name and attributes and converts between a Python value
and a header:

    Cookie header -> parse -> unsign -> decode -> value
    value -> encode -> sign -> serialize -> Set-Cookie header

The empty string is a sentinel that skips encoding and signing in both
directions; it is what a cleared cookie carries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from . import codec
from .header import parse_cookie_header, serialize_cookie
from .signing import Signer

logger = logging.getLogger("tessera.cookies")


# ============================================================================
# CookieOptions
# ============================================================================

@dataclass(frozen=True)
class CookieOptions:
    """
    Cookie attributes and signing secrets.

    Attributes:
        path: Cookie path
        domain: Cookie domain
        max_age: Lifetime in seconds (wins over expires for Cookie.expires)
        expires: Absolute expiry
        http_only: HttpOnly flag
        secure: Secure flag
        same_site: SameSite policy (True, "strict", "lax", "none")
        secrets: Signing secrets, current one first. Empty = unsigned.
    """

    path: Optional[str] = "/"
    domain: Optional[str] = None
    max_age: Optional[Union[int, float]] = None
    expires: Optional[datetime] = None
    http_only: bool = False
    secure: bool = False
    same_site: Union[str, bool, None] = None
    secrets: tuple[str, ...] = field(default=(), repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.secrets, (str, bytes)):
            raise TypeError("secrets must be a sequence of strings, not a single string")
        object.__setattr__(self, "secrets", tuple(self.secrets))

    def attributes(self) -> dict[str, Any]:
        """Serializer attributes (everything except secrets)."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "secrets"}


# ============================================================================
# Cookie
# ============================================================================

class Cookie:
    """
    Named cookie with optional signing and secret rotation.

    Example:
        >>> cookie = Cookie("prefs", secrets=["s3cret"], max_age=3600)
        >>> header = await cookie.serialize({"theme": "dark"})
        >>> await cookie.parse(header.split(";")[0])
        {'theme': 'dark'}
    """

    def __init__(self, name: str, options: CookieOptions | None = None, **kwargs: Any):
        """
        Initialize cookie.

        Args:
            name: Cookie name
            options: Cookie options
            **kwargs: Individual CookieOptions fields, applied over options
        """
        self.name = name
        self.options = replace(options or CookieOptions(), **kwargs)
        self._signer = Signer(self.options.secrets)

    def __repr__(self) -> str:
        return f"Cookie(name={self.name!r}, signed={self.is_signed})"

    @property
    def secrets(self) -> tuple[str, ...]:
        return self.options.secrets

    @property
    def is_signed(self) -> bool:
        return self._signer.is_signed

    @property
    def expires(self) -> datetime | None:
        """
        Effective expiry.

        ``now + max_age`` when max_age is configured (evaluated on every
        access), else the configured ``expires``.
        """
        if self.options.max_age is not None:
            return datetime.now(timezone.utc) + timedelta(seconds=self.options.max_age)
        return self.options.expires

    async def parse(self, cookie_header: str | None, **options: Any) -> Any:
        """
        Read this cookie's value from a Cookie header.

        Args:
            cookie_header: Cookie request header
            **options: Parser options (``decode``)

        Returns:
            None if the header or cookie is missing or the signature does not
            verify, "" for an empty cookie, otherwise the decoded value
        """
        if not cookie_header:
            return None

        cookies = parse_cookie_header(cookie_header, **options)
        if self.name not in cookies:
            return None

        raw = cookies[self.name]
        if raw == "":
            return ""

        return self._decode_value(raw)

    async def serialize(self, value: Any, **options: Any) -> str:
        """
        Build a Set-Cookie header for a value.

        Args:
            value: JSON-serializable value ("" clears the cookie)
            **options: Attribute overrides for this call only

        Returns:
            Set-Cookie header value
        """
        attributes = self.options.attributes()
        attributes.update(options)

        raw = "" if value == "" else self._encode_value(value)
        return serialize_cookie(self.name, raw, **attributes)

    def _encode_value(self, value: Any) -> str:
        return self._signer.sign(codec.encode(value))

    def _decode_value(self, raw: str) -> Any:
        unsigned = self._signer.unsign(raw)
        if unsigned is None:
            logger.debug("Cookie %r failed signature verification", self.name)
            return None
        return codec.decode(unsigned)


def is_cookie(value: Any) -> bool:
    """Check whether an object quacks like a Cookie."""
    return (
        value is not None
        and isinstance(getattr(value, "name", None), str)
        and isinstance(getattr(value, "is_signed", None), bool)
        and callable(getattr(value, "parse", None))
        and callable(getattr(value, "serialize", None))
    )
