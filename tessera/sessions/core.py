"""
TesseraSessions - Core types.

Defines the Session state container:
- Normal values: read and written freely
- Flash values: readable exactly once (post-redirect notices)

The two namespaces are kept in separate mappings, so no user key can ever
collide with a flash entry.
"""

from __future__ import annotations

from typing import Any, Mapping


# ============================================================================
# Session - Core Data Object
# ============================================================================

class Session:
    """
    Request-scoped session state with flash values.

    A Session does not know how it is stored. Storages build one from
    ``Session.from_data()`` and persist ``session.data``.

    Attributes:
        id: Opaque identifier assigned by a store ("" for cookie sessions)

    Example:
        >>> session = Session({"user": "alice"})
        >>> session.flash("notice", "Saved")
        >>> session.has("notice")
        True
        >>> session.get("notice")
        'Saved'
        >>> session.get("notice") is None
        True
    """

    __slots__ = ("_id", "_values", "_flash")

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        flash: Mapping[str, Any] | None = None,
        id: str = "",
    ):
        """
        Create session.

        Args:
            values: Initial normal values
            flash: Initial flash values
            id: Store-assigned identifier
        """
        self._id = id
        self._values: dict[str, Any] = dict(values or {})
        self._flash: dict[str, Any] = dict(flash or {})

    def __repr__(self) -> str:
        return f"Session(id={self._id!r}, keys={list(self._values)}, flash={list(self._flash)})"

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    @property
    def id(self) -> str:
        return self._id

    @property
    def data(self) -> dict[str, dict[str, Any]]:
        """Snapshot of both namespaces, for serialization."""
        return {"values": dict(self._values), "flash": dict(self._flash)}

    @classmethod
    def from_data(cls, data: Any, id: str = "") -> Session:
        """
        Rebuild a session from a ``data`` snapshot.

        Anything that is not a snapshot (foreign cookie, corrupted store row,
        ``None``) yields an empty session.
        """
        if not isinstance(data, Mapping):
            return cls(id=id)

        values = data.get("values")
        flash = data.get("flash")
        return cls(
            values=values if isinstance(values, Mapping) else None,
            flash=flash if isinstance(flash, Mapping) else None,
            id=id,
        )

    # ========================================================================
    # Data access
    # ========================================================================

    def has(self, key: str) -> bool:
        """Check for a normal or flash value. Never consumes flash."""
        return key in self._values or key in self._flash

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a value.

        Normal values win. Otherwise a flash value is returned and removed.
        """
        if key in self._values:
            return self._values[key]

        if key in self._flash:
            return self._flash.pop(key)

        return default

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def flash(self, key: str, value: Any) -> None:
        """Set a value that is removed by the first ``get``."""
        self._flash[key] = value

    def unset(self, key: str) -> None:
        """Remove a normal value. Flash values are left alone."""
        self._values.pop(key, None)
