from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

import jsonschema

from .errors import ErrorCode, ProtocolError
from .messages import Message

SCHEMA_DIR = Path(__file__).parent / "schemas"
MESSAGE_SCHEMA = "message.json"


@lru_cache(maxsize=4)
def load_schema(name: str = MESSAGE_SCHEMA) -> dict:
    """Load a bundled JSON schema by file name."""
    with (SCHEMA_DIR / name).open("r", encoding="utf-8") as fp:
        return json.load(fp)


def validate_message(message: Message, schema: Optional[dict] = None) -> None:
    """Check that every field of ``message`` can be framed safely.

    The codec never escapes field content, so a control byte or a non-ASCII
    character would corrupt the frame on the wire.
    """
    if schema is None:
        schema = load_schema()
    try:
        jsonschema.validate(instance=message.model_dump(), schema=schema)
    except jsonschema.ValidationError as exc:
        raise ProtocolError(ErrorCode.INVALID_FIELD, f"Message validation failed: {exc.message}") from exc


__all__ = ["load_schema", "validate_message"]
