"""Delimited message protocol over byte-stream sockets."""

from paramsock.core import ProtocolConnection
from paramsock.protocol import Message, MissingStartPolicy, ProtocolError

__version__ = "1.0.0"

__all__ = ["Message", "MissingStartPolicy", "ProtocolConnection", "ProtocolError", "__version__"]
