"""
Protocol package: wire constants, the message model, the frame codec,
and validation helpers shared by every connection.
"""

from .buffer import AccumulationBuffer
from .constants import (
    DEFAULT_BUFFER_SIZE,
    ENCODING,
    END_TOKEN,
    ERROR_COMMAND,
    FIELD_SEPARATOR,
    MAX_FIELD_SIZE,
    RECORD_SEPARATOR,
    START_TOKEN,
)
from .errors import (
    ConnectionClosedError,
    EncodingError,
    ErrorCode,
    FieldTooLargeError,
    MissingStartError,
    ProtocolError,
    TruncatedFrameError,
)
from .framing import MissingStartPolicy, byte_reader, decode_bytes, decode_frame, encode_message, encode_parts
from .messages import Message
from .validator import load_schema, validate_message

__all__ = [
    "AccumulationBuffer",
    "DEFAULT_BUFFER_SIZE",
    "ENCODING",
    "END_TOKEN",
    "ERROR_COMMAND",
    "FIELD_SEPARATOR",
    "MAX_FIELD_SIZE",
    "RECORD_SEPARATOR",
    "START_TOKEN",
    "ConnectionClosedError",
    "EncodingError",
    "ErrorCode",
    "FieldTooLargeError",
    "MissingStartError",
    "ProtocolError",
    "TruncatedFrameError",
    "MissingStartPolicy",
    "byte_reader",
    "decode_bytes",
    "decode_frame",
    "encode_message",
    "encode_parts",
    "Message",
    "load_schema",
    "validate_message",
]
