"""
Tessera - Signed cookie sessions for async Python web apps

Complete integration of:
- Cookies: JSON/base64 codec, HMAC signing with secret rotation
- Sessions: flash values, cookie-backed and store-backed storages
- Faults: Structured error handling with fault domains
- Config: Layered configuration from .env, environment and overrides
"""

__version__ = "0.1.0"

# ============================================================================
# Faults
# ============================================================================

from .faults import Fault, FaultDomain, Severity

# ============================================================================
# Cookies
# ============================================================================

from .cookies import (
    Cookie,
    CookieOptions,
    CookieEncodeFault,
    Signer,
    is_cookie,
    encode,
    decode,
)

# ============================================================================
# Sessions
# ============================================================================

from .sessions import (
    Session,
    SessionStorage,
    SessionStorageFactory,
    CookieSessionStorage,
    StoreSessionStorage,
    MemorySessionFactory,
    CookieSizeExceededFault,
)

from .config import SessionConfig, ConfigLoader, SessionConfigFault

__all__ = [
    "__version__",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    # Cookies
    "Cookie",
    "CookieOptions",
    "CookieEncodeFault",
    "Signer",
    "is_cookie",
    "encode",
    "decode",
    # Sessions
    "Session",
    "SessionStorage",
    "SessionStorageFactory",
    "CookieSessionStorage",
    "StoreSessionStorage",
    "MemorySessionFactory",
    "CookieSizeExceededFault",
    # Config
    "SessionConfig",
    "ConfigLoader",
    "SessionConfigFault",
]
