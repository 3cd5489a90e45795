"""
Cookie signing with HMAC and secret rotation.

Signed values have the form ``value.signature`` where the signature is the
standard-base64 HMAC-SHA256 of ``value`` with padding stripped. This is the
format used by the ``cookie-signature`` package, so cookies signed elsewhere
with the same secret verify here and vice versa.
"""

from __future__ import annotations

import hashlib
import hmac
from base64 import b64encode
from typing import Iterable, Optional, Sequence, Union


def _digest(value: str, secret: Union[str, bytes], algorithm: str) -> str:
    if isinstance(secret, str):
        secret = secret.encode("utf-8")

    mac = hmac.new(secret, value.encode("utf-8"), getattr(hashlib, algorithm))
    return b64encode(mac.digest()).decode("ascii").rstrip("=")


def sign(value: str, secret: Union[str, bytes], algorithm: str = "sha256") -> str:
    """
    Sign a value with a single secret.

    Returns: ``value.signature``
    """
    return f"{value}.{_digest(value, secret, algorithm)}"


def unsign(signed_value: str, secret: Union[str, bytes], algorithm: str = "sha256") -> Optional[str]:
    """
    Verify a signed value with a single secret.

    Returns: Original value if signature valid, None otherwise
    """
    value, sep, _ = signed_value.rpartition(".")
    if not sep:
        return None

    expected = sign(value, secret, algorithm)
    if not hmac.compare_digest(signed_value.encode("utf-8"), expected.encode("utf-8")):
        return None

    return value


class Signer:
    """
    Keyring signer with rotation support.

    The first secret signs; every secret verifies, tried in order. Rotating
    is a matter of prepending the new secret, and dropping the old one once
    the cookies it signed have expired.

    An empty keyring disables signing: values pass through untouched.

    Example:
        >>> signer = Signer(["new-secret", "old-secret"])
        >>> signed = sign("payload", "old-secret")
        >>> signer.unsign(signed)
        'payload'
    """

    def __init__(self, secrets: Iterable[Union[str, bytes]] = (), algorithm: str = "sha256"):
        """
        Initialize signer.

        Args:
            secrets: Ordered secrets, current one first
            algorithm: Hash algorithm (sha256, sha384, sha512)
        """
        self.secrets: tuple[Union[str, bytes], ...] = tuple(secrets)
        self.algorithm = algorithm
        getattr(hashlib, algorithm)  # fail fast on unknown algorithms

    @property
    def is_signed(self) -> bool:
        return len(self.secrets) > 0

    def sign(self, value: str) -> str:
        """Sign with the current (first) secret."""
        if not self.secrets:
            return value
        return sign(value, self.secrets[0], self.algorithm)

    def unsign(self, signed_value: str) -> Optional[str]:
        """
        Verify against every secret in order; first match wins.

        Returns: Original value, or None if no secret verifies
        """
        if not self.secrets:
            return signed_value

        for secret in self.secrets:
            value = unsign(signed_value, secret, self.algorithm)
            if value is not None:
                return value

        return None


def verify(signed_value: str, secrets: Sequence[Union[str, bytes]]) -> Optional[str]:
    """Verify ``signed_value`` against an ordered secret list."""
    return Signer(secrets).unsign(signed_value)
