from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .constants import ERROR_COMMAND


class Message(BaseModel):
    """One protocol exchange: ordered positional parts plus named parameters."""

    parts: List[str] = Field(default_factory=list, description="Positional fields, parts[0] is the command")
    named_parameters: Dict[str, str] = Field(default_factory=dict, description="Named key/value fields")

    @classmethod
    def of(cls, *parts: str, **named_parameters: str) -> "Message":
        return cls(parts=list(parts), named_parameters=dict(named_parameters))

    @classmethod
    def error(cls, diagnostic: str) -> "Message":
        return cls(parts=[ERROR_COMMAND, diagnostic])

    @property
    def command(self) -> Optional[str]:
        return self.parts[0] if self.parts else None

    @property
    def is_error(self) -> bool:
        return self.command == ERROR_COMMAND

    def __str__(self) -> str:
        fields = list(self.parts)
        fields.extend(f"{name}={value}" for name, value in self.named_parameters.items())
        return "/".join(fields)


__all__ = ["Message"]
