"""
TesseraSessions - Cookie-carried session state.

This package provides:
- Session: key/value state with one-shot flash values
- CookieSessionStorage: whole session signed and encoded into the cookie
- StoreSessionStorage: session id in the cookie, data in a store
- SessionStorageFactory: contract for session stores
- MemorySessionFactory: in-memory store for development and tests

Philosophy:
- Sessions are explicit (no hidden globals)
- Bad cookies degrade to empty sessions, never to errors
- Oversized cookies are errors, never silently truncated
"""

from .core import Session

from .storage import (
    SessionStorage,
    SessionStorageFactory,
    CookieSessionStorage,
    StoreSessionStorage,
    DEFAULT_COOKIE_NAME,
    MAX_COOKIE_LENGTH,
)

from .memory import MemorySessionFactory, generate_session_id

from .faults import (
    SessionFault,
    CookieSizeExceededFault,
)

__all__ = [
    # Core types
    "Session",
    # Storage
    "SessionStorage",
    "SessionStorageFactory",
    "CookieSessionStorage",
    "StoreSessionStorage",
    "MemorySessionFactory",
    "generate_session_id",
    "DEFAULT_COOKIE_NAME",
    "MAX_COOKIE_LENGTH",
    # Faults
    "SessionFault",
    "CookieSizeExceededFault",
]
