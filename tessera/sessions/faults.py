"""
TesseraSessions - Fault definitions.

All session errors are structured Faults, not bare exceptions.
"""

from tessera.faults.core import Fault, Severity, FaultDomain


# ============================================================================
# Session Fault Base
# ============================================================================

class SessionFault(Fault):
    """Base class for session-related faults."""

    domain = FaultDomain.SESSION


# ============================================================================
# Commit Faults
# ============================================================================

class CookieSizeExceededFault(SessionFault):
    """
    Serialized session cookie is larger than browsers accept.

    This is a data-size error in the caller, not a transient condition:
    the cookie is never truncated and the commit is never retried.
    """

    code = "COOKIE_SIZE_EXCEEDED"
    message = "Cookie length will exceed browser maximum"
    severity = Severity.ERROR
    public = False
    retryable = False

    def __init__(self, cookie_name: str, length: int, limit: int, **kwargs):
        super().__init__(**kwargs)
        self.cookie_name = cookie_name
        self.length = length
        self.limit = limit
        self.message = (
            f"Cookie length will exceed browser maximum. Length: {length} "
            f"(limit {limit}, cookie {cookie_name!r})"
        )
        self.args = (self.message,)
        self.metadata.update({"cookie_name": cookie_name, "length": length, "limit": limit})
