from __future__ import annotations

import logging
import socket
from typing import Optional, Union

from paramsock.protocol import framing, validator
from paramsock.protocol.buffer import AccumulationBuffer
from paramsock.protocol.constants import DEFAULT_BUFFER_SIZE, MAX_FIELD_SIZE
from paramsock.protocol.errors import ConnectionClosedError, ProtocolError
from paramsock.protocol.framing import MissingStartPolicy
from paramsock.protocol.messages import Message
from paramsock.settings import Settings

logger = logging.getLogger(__name__)


class ProtocolConnection:
    """Blocking message connection over an established TCP socket.

    Each instance owns its socket, a buffered reader on top of it and the
    accumulation buffer used while decoding. It is meant for one reader and
    one writer at a time; callers sharing it across threads must serialize.
    """

    def __init__(
        self,
        sock: socket.socket,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        max_field_size: Optional[int] = MAX_FIELD_SIZE,
        missing_start: Union[MissingStartPolicy, str] = MissingStartPolicy.FAIL,
        strict: bool = False,
    ) -> None:
        self.socket = sock
        self.missing_start = MissingStartPolicy(missing_start)
        self.strict = strict
        self._buffer = AccumulationBuffer(buffer_size, max_field_size)
        self._reader = sock.makefile("rb")
        self._read_byte = framing.byte_reader(self._reader)
        self._closed = False
        try:
            self.peername = str(sock.getpeername())
        except OSError:
            self.peername = "<unconnected>"

    @classmethod
    def connect(cls, host: str, port: int, timeout: Optional[float] = None, **kwargs) -> "ProtocolConnection":
        """Open a TCP connection to ``host:port`` (single attempt) and wrap it."""
        sock = socket.create_connection((host, port), timeout=timeout)
        logger.info("Connected to %s:%s", host, port)
        return cls(sock, **kwargs)

    @classmethod
    def from_settings(cls, sock: socket.socket, settings: Settings) -> "ProtocolConnection":
        if settings.read_timeout is not None:
            sock.settimeout(settings.read_timeout)
        return cls(
            sock,
            buffer_size=settings.buffer_size,
            max_field_size=settings.max_field_size,
            missing_start=settings.missing_start,
            strict=settings.strict,
        )

    def write_message(self, message: Message) -> None:
        if not message.parts:
            logger.debug("Skipping empty message to %s", self.peername)
            return
        self._ensure_open()
        if self.strict:
            validator.validate_message(message)
        payload = framing.encode_message(message)
        self.socket.sendall(payload)
        logger.debug("Sent %s to %s", message, self.peername)

    def read_message(self) -> Message:
        """Read one frame, reporting protocol violations to the peer as ERROR frames.

        Raises a ``ProtocolError`` subclass when the frame cannot be decoded and
        lets socket failures (``OSError``) propagate unchanged.
        """
        self._ensure_open()
        message = framing.decode_frame(
            self._read_byte,
            buffer=self._buffer,
            on_error=self._report,
            missing_start=self.missing_start,
        )
        logger.debug("Received %s from %s", message, self.peername)
        return message

    def send_error(self, diagnostic: str) -> None:
        self.write_message(Message.error(diagnostic))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._reader.close()
        finally:
            self.socket.close()
        logger.debug("Connection to %s closed", self.peername)

    def is_closed(self) -> bool:
        return self._closed or self.socket.fileno() == -1

    def is_connected(self) -> bool:
        if self.is_closed():
            return False
        try:
            self.socket.getpeername()
        except OSError:
            return False
        return True

    def __enter__(self) -> "ProtocolConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConnectionClosedError(f"Connection to {self.peername} is closed")

    def _report(self, error: ProtocolError) -> None:
        logger.warning("Protocol error from %s: %s", self.peername, error)
        try:
            self.socket.sendall(framing.encode_message(error.to_message()))
        except OSError as exc:
            logger.warning("Could not report protocol error to %s: %s", self.peername, exc)
