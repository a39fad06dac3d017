from __future__ import annotations

from typing import Optional

from .constants import DEFAULT_BUFFER_SIZE
from .errors import FieldTooLargeError


class AccumulationBuffer:
    """Growable byte buffer holding the field currently being decoded.

    Capacity starts at ``initial_capacity`` and doubles whenever it fills up,
    so field length is bounded only by ``max_size`` (``None`` means unbounded).
    One buffer belongs to exactly one connection and is not thread-safe.
    """

    def __init__(self, initial_capacity: int = DEFAULT_BUFFER_SIZE, max_size: Optional[int] = None) -> None:
        if initial_capacity <= 0:
            raise ValueError("initial_capacity must be positive")
        self._data = bytearray(initial_capacity)
        self._count = 0
        self.max_size = max_size

    @property
    def capacity(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return self._count

    def append(self, byte: int) -> None:
        if self.max_size is not None and self._count >= self.max_size:
            raise FieldTooLargeError(self.max_size)
        if self._count == len(self._data):
            grown = bytearray(len(self._data) * 2)
            grown[: self._count] = self._data
            self._data = grown
        self._data[self._count] = byte
        self._count += 1

    def take(self, encoding: str) -> str:
        """Return the accumulated bytes as text and clear the buffer."""
        text = bytes(self._data[: self._count]).decode(encoding, errors="replace")
        self._count = 0
        return text

    def clear(self) -> None:
        self._count = 0


__all__ = ["AccumulationBuffer"]
