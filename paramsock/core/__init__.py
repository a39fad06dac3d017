from .connection import ProtocolConnection

__all__ = ["ProtocolConnection"]
