"""Port interface for the local key-value cache."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LocalCache(Protocol):
    """Synchronous best-effort key-value cache.

    Plays the role of browser localStorage: always available and never
    raises. Implementations log and swallow their own I/O errors.
    """

    def get(self, key: str) -> str | None:
        """Get a stored value, or None if absent or unreadable."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, overwriting any previous one."""
        ...
