from __future__ import annotations

from enum import IntEnum

from .messages import Message


class ErrorCode(IntEnum):
    """Protocol level error codes."""

    MISSING_START = 1001
    TRUNCATED_FRAME = 1002
    FIELD_TOO_LARGE = 1003
    ENCODING = 1004
    INVALID_FIELD = 1005


class ProtocolError(Exception):
    """Structured protocol exception carrying a code and a diagnostic."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code.name} ({int(code)}): {message}")

    def to_message(self) -> Message:
        """Map error into the in-band ERROR message sent back to the peer."""
        return Message.error(self.message)


class MissingStartError(ProtocolError):
    """First byte of a frame was not START_TOKEN."""

    def __init__(self, message: str = "Invalid command (expected START_TOKEN).") -> None:
        super().__init__(ErrorCode.MISSING_START, message)


class TruncatedFrameError(ProtocolError):
    """Stream ended before END_TOKEN was read."""

    def __init__(self, message: str = "Invalid command: stream ended before END_TOKEN was read.") -> None:
        super().__init__(ErrorCode.TRUNCATED_FRAME, message)


class FieldTooLargeError(ProtocolError):
    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(ErrorCode.FIELD_TOO_LARGE, f"Invalid command: field exceeds {limit} bytes.")


class EncodingError(ProtocolError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.ENCODING, message)


class ConnectionClosedError(Exception):
    """Raised when a closed connection is used."""

    pass


__all__ = [
    "ErrorCode",
    "ProtocolError",
    "MissingStartError",
    "TruncatedFrameError",
    "FieldTooLargeError",
    "EncodingError",
    "ConnectionClosedError",
]
