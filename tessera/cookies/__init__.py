"""
TesseraCookies - Signed, encoded cookies.

- Cookie / CookieOptions: named cookie with attributes and secrets
- encode / decode: JSON <-> base64 cookie value codec (decode never raises)
- Signer / sign / unsign: HMAC signing with secret rotation
- parse_cookie_header / serialize_cookie: header grammar
"""

from .codec import encode, decode
from .signing import Signer, sign, unsign, verify
from .header import parse_cookie_header, serialize_cookie
from .cookie import Cookie, CookieOptions, is_cookie
from .faults import CookieFault, CookieEncodeFault

__all__ = [
    "Cookie",
    "CookieOptions",
    "is_cookie",
    "encode",
    "decode",
    "Signer",
    "sign",
    "unsign",
    "verify",
    "parse_cookie_header",
    "serialize_cookie",
    "CookieFault",
    "CookieEncodeFault",
]
