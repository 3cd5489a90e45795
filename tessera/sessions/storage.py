"""
TesseraSessions - Session storage.

Two ways to keep a session between requests:

- CookieSessionStorage: the whole session is encoded into the cookie.
  No server state; limited to what fits in a cookie.
- StoreSessionStorage: the cookie carries only an opaque session id; the
  data lives in a SessionStorageFactory (database, cache, memory).

Both expose the same request-facing contract (SessionStorage):
get_session / commit_session / destroy_session.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from tessera.cookies import Cookie, is_cookie
from .core import Session
from .faults import CookieSizeExceededFault

DEFAULT_COOKIE_NAME = "_Session"

# Browsers reject Set-Cookie values above this size
MAX_COOKIE_LENGTH = 4096

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


# ============================================================================
# SessionStorageFactory - Store Contract
# ============================================================================

class SessionStorageFactory(ABC):
    """
    Persistence contract for store-backed sessions.

    Implementations own id generation, durability and expiry enforcement.
    Every call is independent and keyed by session id; retry policy and
    error handling belong to the implementation.
    """

    @abstractmethod
    async def create_data(self, data: dict[str, Any], expires: datetime | None = None) -> str:
        """
        Persist new session data.

        Args:
            data: Session snapshot
            expires: When the data may be discarded (None = no expiry)

        Returns:
            New session id
        """

    @abstractmethod
    async def read_data(self, id: str) -> dict[str, Any] | None:
        """Load session data, or None if unknown or expired."""

    @abstractmethod
    async def update_data(self, id: str, data: dict[str, Any], expires: datetime | None = None) -> None:
        """Replace session data."""

    @abstractmethod
    async def delete_data(self, id: str) -> None:
        """Remove session data. Deleting an unknown id is not an error."""


# ============================================================================
# SessionStorage - Request-facing Contract
# ============================================================================

class SessionStorage(ABC):
    """
    Abstract session storage consumed by request handlers.

    Each storage owns exactly one Cookie, either passed in or built from
    cookie options (name defaults to ``_Session``, path to ``/``).

    Example:
        >>> storage = CookieSessionStorage(name="app", secrets=["s3cret"])
        >>> session = await storage.get_session(request.header("cookie"))
        >>> session.set("user", "alice")
        >>> response.add_header("set-cookie", await storage.commit_session(session))
    """

    def __init__(
        self,
        cookie: Cookie | Mapping[str, Any] | None = None,
        *,
        logger: logging.Logger | None = None,
        **options: Any,
    ):
        """
        Initialize storage.

        Args:
            cookie: Preexisting Cookie, or a mapping of cookie options
            logger: Optional logger
            **options: Cookie options (name, secrets, path, max_age, ...)
        """
        if is_cookie(cookie):
            if options:
                raise TypeError("Cookie options cannot be combined with a Cookie instance")
            self.cookie = cookie
        else:
            cookie_options = dict(cookie or {})
            cookie_options.update(options)
            name = cookie_options.pop("name", DEFAULT_COOKIE_NAME)
            self.cookie = Cookie(name, **cookie_options)

        self.logger = logger or logging.getLogger("tessera.sessions")

    @abstractmethod
    async def get_session(self, cookie_header: str | None = None, **options: Any) -> Session:
        """
        Resolve the session for a request.

        Args:
            cookie_header: Cookie request header
            **options: Cookie parse options

        Returns:
            Session (empty when there is no valid cookie)
        """

    @abstractmethod
    async def commit_session(self, session: Session, **options: Any) -> str:
        """
        Persist a session.

        Args:
            session: Session to persist
            **options: Cookie attribute overrides

        Returns:
            Set-Cookie header value
        """

    @abstractmethod
    async def destroy_session(self, session: Session, **options: Any) -> str:
        """
        Destroy a session.

        Returns:
            Set-Cookie header value that clears the cookie
        """

    async def _clearing_cookie(self, **options: Any) -> str:
        """Empty, already-expired cookie."""
        options.update(expires=EPOCH, max_age=None)
        return await self.cookie.serialize("", **options)


# ============================================================================
# CookieSessionStorage - Data in Cookie
# ============================================================================

class CookieSessionStorage(SessionStorage):
    """
    Session storage that keeps all data in the cookie itself.

    Use signing secrets: without them, anyone can forge a session. The data
    is encoded, not encrypted, so never store secrets in it.
    """

    async def get_session(self, cookie_header: str | None = None, **options: Any) -> Session:
        data = await self.cookie.parse(cookie_header, **options) if cookie_header else None
        return Session.from_data(data)

    async def commit_session(self, session: Session, **options: Any) -> str:
        serialized = await self.cookie.serialize(session.data, **options)

        if len(serialized) > MAX_COOKIE_LENGTH:
            self.logger.warning(
                "Refusing to commit session cookie %r: %d characters",
                self.cookie.name,
                len(serialized),
            )
            raise CookieSizeExceededFault(
                cookie_name=self.cookie.name,
                length=len(serialized),
                limit=MAX_COOKIE_LENGTH,
            )

        return serialized

    async def destroy_session(self, session: Session, **options: Any) -> str:
        return await self._clearing_cookie(**options)


# ============================================================================
# StoreSessionStorage - Id in Cookie, Data in Store
# ============================================================================

class StoreSessionStorage(SessionStorage):
    """
    Session storage that keeps the session id in the cookie and the data in
    a SessionStorageFactory.

    The first commit of a new session stores the id the factory assigns on
    the Session, so later commits update the same row.

    Example:
        >>> storage = StoreSessionStorage(MemorySessionFactory(), secrets=["s3cret"])
        >>> session = await storage.get_session(cookie_header)
        >>> session.id  # "" until the first commit
    """

    def __init__(
        self,
        factory: SessionStorageFactory,
        cookie: Cookie | Mapping[str, Any] | None = None,
        *,
        logger: logging.Logger | None = None,
        **options: Any,
    ):
        super().__init__(cookie, logger=logger, **options)
        self.factory = factory

    async def get_session(self, cookie_header: str | None = None, **options: Any) -> Session:
        session_id = await self.cookie.parse(cookie_header, **options) if cookie_header else None

        if isinstance(session_id, str) and session_id:
            data = await self.factory.read_data(session_id)
            if data is not None:
                return Session.from_data(data, id=session_id)
            self.logger.debug("Session id from cookie %r not found in store", self.cookie.name)

        return Session()

    async def commit_session(self, session: Session, **options: Any) -> str:
        expires = self._expires(options)

        if session.id:
            session_id = session.id
            await self.factory.update_data(session_id, session.data, expires)
            self.logger.debug("Session updated in store")
        else:
            session_id = await self.factory.create_data(session.data, expires)
            session._id = session_id
            self.logger.debug("Session created in store")

        return await self.cookie.serialize(session_id, **options)

    async def destroy_session(self, session: Session, **options: Any) -> str:
        if session.id:
            await self.factory.delete_data(session.id)
            self.logger.debug("Session deleted from store")

        return await self._clearing_cookie(**options)

    def _expires(self, options: Mapping[str, Any]) -> datetime | None:
        """Expiry for the store row, honouring per-call cookie overrides."""
        if options.get("max_age") is not None:
            return datetime.now(timezone.utc) + timedelta(seconds=options["max_age"])
        if options.get("expires") is not None:
            return options["expires"]
        return self.cookie.expires
