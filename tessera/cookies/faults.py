"""
Cookie fault definitions.
"""

from tessera.faults.core import Fault, FaultDomain, Severity


class CookieFault(Fault):
    """Base class for cookie codec and signing faults."""

    domain = FaultDomain.COOKIE


class CookieEncodeFault(CookieFault):
    """
    Value cannot be encoded into a cookie.

    Raised when the value has no JSON representation: arbitrary objects,
    circular structures, NaN or Infinity. Encoding never drops data silently.
    """

    code = "COOKIE_ENCODE_FAILED"
    message = "Cookie value is not JSON-serializable"
    severity = Severity.ERROR
    public = False
    retryable = False

    def __init__(self, value_type: str, cause: str, **kwargs):
        super().__init__(**kwargs)
        self.value_type = value_type
        self.cause = cause
        self.message = f"Cannot encode {value_type} into a cookie: {cause}"
        self.args = (self.message,)
