"""Frame codec for the control-byte delimited message protocol.

Frame layout::

    START field (RS (field | name FS field))* END

- START: 0x01, END: 0x04
- RS (record separator, 0x1E) closes a positional part or a named parameter
- FS (field separator, 0x1F) closes a parameter name; the value follows
- Field content is 7-bit ASCII and must not contain any of the four control bytes

The first field after START is always a positional part (the command).
"""

from __future__ import annotations

import io
from enum import StrEnum
from typing import BinaryIO, Callable, Dict, List, NoReturn, Optional

from .buffer import AccumulationBuffer
from .constants import ENCODING, END_TOKEN, FIELD_SEPARATOR, RECORD_SEPARATOR, START_TOKEN
from .errors import EncodingError, FieldTooLargeError, MissingStartError, ProtocolError, TruncatedFrameError
from .messages import Message

ByteSource = Callable[[], Optional[int]]
ErrorReporter = Callable[[ProtocolError], None]


class MissingStartPolicy(StrEnum):
    """What the decoder does after reporting a frame that does not begin with START."""

    FAIL = "fail"
    RESYNC = "resync"
    LENIENT = "lenient"


def encode_message(message: Message) -> bytes:
    """Encode a message into one frame. Messages without parts encode to ``b""``."""
    if not message.parts:
        return b""
    fields = list(message.parts)
    fields.extend(f"{name}{chr(FIELD_SEPARATOR)}{value}" for name, value in message.named_parameters.items())
    text = chr(START_TOKEN) + chr(RECORD_SEPARATOR).join(fields) + chr(END_TOKEN)
    try:
        return text.encode(ENCODING)
    except UnicodeEncodeError as exc:
        raise EncodingError(f"Encode failed: {exc}") from exc


def encode_parts(*parts: str) -> bytes:
    return encode_message(Message.of(*parts))


def byte_reader(stream: BinaryIO) -> ByteSource:
    """Adapt a binary stream into a source yielding one byte per call, ``None`` at end of stream."""

    def read_byte() -> Optional[int]:
        chunk = stream.read(1)
        return chunk[0] if chunk else None

    return read_byte


def decode_frame(
    read_byte: ByteSource,
    buffer: Optional[AccumulationBuffer] = None,
    on_error: Optional[ErrorReporter] = None,
    missing_start: MissingStartPolicy = MissingStartPolicy.FAIL,
) -> Message:
    """Consume exactly one frame from ``read_byte`` and return the decoded message.

    Every protocol violation is passed to ``on_error`` before anything else is
    read, so a connection can send the ERROR frame to its peer straight away.
    Violations that end the frame are then raised; a missing START only raises
    under ``MissingStartPolicy.FAIL``.
    """
    buffer = buffer if buffer is not None else AccumulationBuffer()
    buffer.clear()
    report = on_error or _ignore

    first = read_byte()
    if first != START_TOKEN:
        if first is None and missing_start != MissingStartPolicy.LENIENT:
            _fail(TruncatedFrameError(), report)
        error = MissingStartError()
        report(error)
        if missing_start == MissingStartPolicy.FAIL:
            raise error
        if missing_start == MissingStartPolicy.RESYNC:
            _skip_to_start(read_byte, report)

    parts: List[str] = []
    named: Dict[str, str] = {}
    pending_name: Optional[str] = None
    separated = False

    while True:
        byte = read_byte()
        if byte is None:
            buffer.clear()
            _fail(TruncatedFrameError(), report)
        if byte == END_TOKEN:
            break
        if byte == FIELD_SEPARATOR and separated:
            pending_name = buffer.take(ENCODING)
        elif byte in (RECORD_SEPARATOR, FIELD_SEPARATOR):
            # a separator inside the first field still closes the command
            _store(buffer.take(ENCODING), pending_name, parts, named)
            pending_name = None
            separated = True
        else:
            try:
                buffer.append(byte)
            except FieldTooLargeError as exc:
                buffer.clear()
                report(exc)
                _drain_frame(read_byte)
                raise

    if len(buffer):
        _store(buffer.take(ENCODING), pending_name, parts, named)
    return Message(parts=parts, named_parameters=named)


def decode_bytes(data: bytes, **kwargs) -> Message:
    """Decode one frame from an in-memory byte string."""
    return decode_frame(byte_reader(io.BytesIO(data)), **kwargs)


def _store(field: str, name: Optional[str], parts: List[str], named: Dict[str, str]) -> None:
    if name is None:
        parts.append(field)
    else:
        named[name] = field


def _skip_to_start(read_byte: ByteSource, report: ErrorReporter) -> None:
    while True:
        byte = read_byte()
        if byte is None:
            _fail(TruncatedFrameError(), report)
        if byte == START_TOKEN:
            return


def _drain_frame(read_byte: ByteSource) -> None:
    """Discard the rest of an oversized frame so the next read starts on a frame boundary."""
    while True:
        byte = read_byte()
        if byte is None or byte == END_TOKEN:
            return


def _fail(error: ProtocolError, report: ErrorReporter) -> NoReturn:
    report(error)
    raise error


def _ignore(error: ProtocolError) -> None:
    return None


__all__ = [
    "ByteSource",
    "ErrorReporter",
    "MissingStartPolicy",
    "encode_message",
    "encode_parts",
    "byte_reader",
    "decode_frame",
    "decode_bytes",
]
