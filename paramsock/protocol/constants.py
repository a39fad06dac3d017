"""Wire-level constants shared by every connection."""

ENCODING = "ascii"

START_TOKEN = 0x01
END_TOKEN = 0x04
RECORD_SEPARATOR = 0x1E
FIELD_SEPARATOR = 0x1F

ERROR_COMMAND = "ERROR"
DEFAULT_BUFFER_SIZE = 2048
MAX_FIELD_SIZE = 256 * 1024  # 256 KB upper bound for a single field

__all__ = [
    "ENCODING",
    "START_TOKEN",
    "END_TOKEN",
    "RECORD_SEPARATOR",
    "FIELD_SEPARATOR",
    "ERROR_COMMAND",
    "DEFAULT_BUFFER_SIZE",
    "MAX_FIELD_SIZE",
]
