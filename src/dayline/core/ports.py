# src/dayline/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The registry depends on Protocols instead of concrete implementations.
This keeps storage/clock/id generation swappable and makes testing easier.
"""

from typing import Protocol


class KeyValueStorage(Protocol):
    """
    Key/value persistence for raw text records.

    get() returns None when the key was never written.
    Implementations may raise; the registry treats any failure as "no data"
    on read and logs it on write.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class Clock(Protocol):
    def now_minutes(self) -> int:
        """Local wall-clock time as minutes since midnight (0..1439)."""
        ...

    def now_ts(self) -> float:
        """Timestamp used for task creation order."""
        ...


class IdSource(Protocol):
    def new_id(self) -> str: ...
