"""
TesseraFaults - Structured fault types.

Errors in Tessera are typed fault signals with a stable code, a domain and a
severity, so callers can branch on ``fault.code`` instead of parsing messages.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    DOMAIN_DEFAULTS,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",
]
