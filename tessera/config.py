"""
Config system - Layered session configuration.

Merge precedence (later wins):
defaults < .env file < environment variables < explicit overrides

Environment keys use a prefix (``TESSERA_`` by default) followed by the
upper-cased field name, e.g. ``TESSERA_SECRETS`` or ``TESSERA_MAX_AGE``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from dotenv import dotenv_values

from tessera.cookies import Cookie, CookieOptions
from tessera.faults.core import Fault, FaultDomain, Severity
from tessera.sessions import (
    CookieSessionStorage,
    SessionStorage,
    SessionStorageFactory,
    StoreSessionStorage,
    DEFAULT_COOKIE_NAME,
)


class SessionConfigFault(Fault):
    """Raised when configuration validation fails."""

    code = "SESSION_CONFIG_INVALID"
    message = "Invalid session configuration"
    domain = FaultDomain.CONFIG
    severity = Severity.FATAL
    retryable = False

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(**kwargs)
        self.key = key
        self.reason = reason
        self.message = f"Invalid session configuration for {key!r}: {reason}"
        self.args = (self.message,)


_TRUE = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0")


@dataclass
class SessionConfig:
    """
    Session cookie configuration.

    Attributes:
        cookie_name: Name of the session cookie
        secrets: Signing secrets, current one first
        path: Cookie path
        domain: Cookie domain
        max_age: Cookie lifetime in seconds (None = browser session)
        http_only: HttpOnly flag
        secure: Secure flag
        same_site: SameSite policy
    """

    cookie_name: str = DEFAULT_COOKIE_NAME
    secrets: tuple[str, ...] = field(default=(), repr=False)
    path: str = "/"
    domain: Optional[str] = None
    max_age: Optional[int] = None
    http_only: bool = True
    secure: bool = False
    same_site: Optional[str] = "lax"

    def cookie_options(self) -> CookieOptions:
        return CookieOptions(
            path=self.path,
            domain=self.domain,
            max_age=self.max_age,
            http_only=self.http_only,
            secure=self.secure,
            same_site=self.same_site,
            secrets=self.secrets,
        )

    def create_cookie(self) -> Cookie:
        return Cookie(self.cookie_name, self.cookie_options())

    def create_storage(self, factory: SessionStorageFactory | None = None) -> SessionStorage:
        """
        Build a storage from this configuration.

        Args:
            factory: Session store. Without one, data lives in the cookie.
        """
        if factory is None:
            return CookieSessionStorage(self.create_cookie())
        return StoreSessionStorage(factory, self.create_cookie())


class ConfigLoader:
    """
    Loads SessionConfig from a .env file, the environment and overrides.

    Example:
        >>> config = ConfigLoader.load(env_file=".env")
        >>> storage = config.create_storage()
    """

    def __init__(self, env_prefix: str = "TESSERA_"):
        self.env_prefix = env_prefix
        self.config_data: dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        env_file: Optional[str] = None,
        env_prefix: str = "TESSERA_",
        overrides: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> SessionConfig:
        """
        Load configuration from multiple sources.

        Args:
            env_file: Path to .env file
            env_prefix: Prefix for environment variables
            overrides: Manual overrides (highest precedence, already typed)
            environ: Environment mapping (defaults to os.environ)

        Returns:
            Validated SessionConfig

        Raises:
            SessionConfigFault: If a value cannot be parsed
        """
        loader = cls(env_prefix=env_prefix)

        if env_file:
            loader._load_env(dotenv_values(env_file))

        loader._load_env(os.environ if environ is None else environ)

        if overrides:
            loader.config_data.update(overrides)

        return loader._build()

    def _load_env(self, values: Mapping[str, Optional[str]]) -> None:
        known = {f.name for f in fields(SessionConfig)}

        for key, value in values.items():
            if not key.startswith(self.env_prefix) or value is None:
                continue

            name = key[len(self.env_prefix):].lower()
            if name in known:
                self.config_data[name] = self._parse_value(name, value)

    def _parse_value(self, name: str, value: str) -> Any:
        """Parse string value according to the field it configures."""
        value = value.strip()

        if name == "secrets":
            if value.startswith("["):
                try:
                    parsed = json.loads(value)
                except json.JSONDecodeError as e:
                    raise SessionConfigFault(name, f"malformed JSON list: {e}")
                return parsed
            return tuple(s.strip() for s in value.split(",") if s.strip())

        if name in ("http_only", "secure"):
            if value.lower() in _TRUE:
                return True
            if value.lower() in _FALSE:
                return False
            raise SessionConfigFault(name, f"expected a boolean, got {value!r}")

        if name == "max_age":
            if not value:
                return None
            try:
                return int(value)
            except ValueError:
                raise SessionConfigFault(name, f"expected seconds as an integer, got {value!r}")

        if name in ("domain", "same_site") and not value:
            return None

        return value

    def _build(self) -> SessionConfig:
        data = dict(self.config_data)

        secrets = data.get("secrets", ())
        if not isinstance(secrets, (list, tuple)) or not all(isinstance(s, str) for s in secrets):
            raise SessionConfigFault("secrets", "expected a list of strings")
        data["secrets"] = tuple(secrets)

        same_site = data.get("same_site", SessionConfig.same_site)
        if same_site is not None and str(same_site).lower() not in ("strict", "lax", "none"):
            raise SessionConfigFault("same_site", f"expected strict, lax or none, got {same_site!r}")

        max_age = data.get("max_age")
        if max_age is not None and (isinstance(max_age, bool) or not isinstance(max_age, int)):
            raise SessionConfigFault("max_age", f"expected seconds as an integer, got {max_age!r}")

        unknown = set(data) - {f.name for f in fields(SessionConfig)}
        for key in unknown:
            data.pop(key)

        return SessionConfig(**data)
