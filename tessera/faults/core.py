"""
TesseraFaults - Core types and fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines logging level and how loudly the caller should react.
    """
    INFO = "info"       # Informational, no action needed
    WARN = "warn"       # Warning, should be reviewed
    ERROR = "error"     # Error, immediate attention
    FATAL = "fatal"     # Fatal, unrecoverable, abort


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name  # For compatibility with Enum consumers
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.COOKIE = FaultDomain("cookie", "Cookie encoding and signing")
FaultDomain.SESSION = FaultDomain("session", "Session storage and lifecycle")


# Domain defaults
DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: {"severity": Severity.FATAL, "retryable": False},
    FaultDomain.COOKIE: {"severity": Severity.ERROR, "retryable": False},
    FaultDomain.SESSION: {"severity": Severity.ERROR, "retryable": False},
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    A fault is NOT a bare exception. It is a first-class value with:
    - Stable machine-readable code
    - Human-readable message
    - Severity level
    - Domain classification
    - Retry semantics
    - Public exposure control

    Subclasses usually declare ``code``, ``message``, ``domain`` and
    ``severity`` as class attributes and only pass the variable parts.

    Attributes:
        code: Stable machine-readable identifier (e.g., "COOKIE_SIZE_EXCEEDED")
        message: Human-readable summary
        severity: Fault severity (INFO, WARN, ERROR, FATAL)
        domain: Fault domain (CONFIG, COOKIE, SESSION, ...)
        retryable: Whether this fault can be retried
        public: Whether safe to expose to client
        metadata: Additional context data

    Example:
        ```python
        raise Fault(
            code="SESSION_NOT_FOUND",
            message="Session sess_abc not found",
            domain=FaultDomain.SESSION,
            severity=Severity.WARN,
        )
        ```
    """

    code: Optional[str] = None
    message: Optional[str] = None
    domain: Optional[FaultDomain] = None
    severity: Optional[Severity] = None
    retryable: Optional[bool] = None
    public: bool = False

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        public: Optional[bool] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        # Fallback to class attributes if not provided
        self.code = code if code is not None else type(self).code
        self.message = message if message is not None else type(self).message
        self.domain = domain if domain is not None else type(self).domain

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        # Explicit argument > class attribute > domain default
        defaults = DOMAIN_DEFAULTS.get(self.domain, {"severity": Severity.ERROR, "retryable": False})
        self.severity = severity or type(self).severity or defaults["severity"]
        if retryable is not None:
            self.retryable = retryable
        elif type(self).retryable is not None:
            self.retryable = type(self).retryable
        else:
            self.retryable = defaults["retryable"]

        self.public = public if public is not None else type(self).public
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize fault to dictionary.

        Returns:
            Dictionary representation suitable for logging/serialization
        """
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "public": self.public,
            "metadata": self.metadata,
        }
