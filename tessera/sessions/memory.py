"""
TesseraSessions - In-memory store.

MemorySessionFactory keeps session rows in a process-local dict. Suitable
for development and tests; data does not survive a restart and is not shared
between processes.
"""

from __future__ import annotations

import asyncio
import base64
import copy
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .storage import SessionStorageFactory

logger = logging.getLogger("tessera.sessions.memory")


def generate_session_id() -> str:
    """
    Opaque session id with 256 bits of randomness.

    Rules:
    - Never encode meaning (no user ID, no timestamps)
    - URL-safe encoding
    - Prefixed for identification (sess_)
    """
    raw = secrets.token_bytes(32)
    return f"sess_{base64.urlsafe_b64encode(raw).decode().rstrip('=')}"


@dataclass
class _Row:
    data: dict[str, Any]
    expires: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires is not None and now >= self.expires


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    # Naive datetimes are taken as UTC
    return value.replace(tzinfo=timezone.utc)


class MemorySessionFactory(SessionStorageFactory):
    """
    In-memory session store.

    Features:
    - Random ``sess_`` ids
    - Stored data is copied in and out (no aliasing with live sessions)
    - Expiry enforced on read: expired rows read as None and are dropped
    - ``update_data`` on an unknown id recreates the row

    Example:
        >>> factory = MemorySessionFactory()
        >>> sid = await factory.create_data({"values": {"n": 1}, "flash": {}})
        >>> await factory.read_data(sid)
        {'values': {'n': 1}, 'flash': {}}
    """

    def __init__(self):
        self._rows: dict[str, _Row] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._rows)

    async def create_data(self, data: dict[str, Any], expires: datetime | None = None) -> str:
        async with self._lock:
            session_id = generate_session_id()
            while session_id in self._rows:
                session_id = generate_session_id()

            self._rows[session_id] = _Row(copy.deepcopy(data), _as_utc(expires))
            logger.debug("Created session row (%d total)", len(self._rows))
            return session_id

    async def read_data(self, id: str) -> dict[str, Any] | None:
        async with self._lock:
            row = self._rows.get(id)
            if row is None:
                return None

            if row.is_expired(datetime.now(timezone.utc)):
                del self._rows[id]
                logger.debug("Dropped expired session row")
                return None

            return copy.deepcopy(row.data)

    async def update_data(self, id: str, data: dict[str, Any], expires: datetime | None = None) -> None:
        async with self._lock:
            self._rows[id] = _Row(copy.deepcopy(data), _as_utc(expires))

    async def delete_data(self, id: str) -> None:
        async with self._lock:
            self._rows.pop(id, None)
