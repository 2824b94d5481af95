"""Framed messages over a pair of byte streams."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Any, BinaryIO, Optional

from .base import Transport, TransportClosed

logger = logging.getLogger(__name__)


class StreamTransport(Transport):
    """Own one input stream and one output stream, and move framed messages
    across them with the supplied *codec*.

    Only one thread may call :meth:`recv`. Any number of threads may call
    :meth:`send`; frames are written whole, one writer at a time.
    """

    def __init__(self, input: BinaryIO, output: BinaryIO, codec: Any, sock: Optional[socket.socket] = None):
        self.input = input
        self.output = output
        self.codec = codec
        self.socket = sock

        # Without the lock, two threads sending at once can and will get
        # their frames mixed together on the wire.
        self.write_lock = threading.Lock()
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed

    def recv(self) -> Optional[Any]:
        if self._closed:
            return None

        try:
            return self.codec.decode(self.input)
        except ValueError:
            # Reading from a stream closed underneath us by close().
            if self._closed:
                return None
            raise

    def send(self, msg: Any) -> None:
        frame = self.codec.pack(msg)

        with self.write_lock:
            if self._closed:
                raise TransportClosed("transport is closed")
            self.output.write(frame)
            self.output.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        # Shutting the socket down first releases a reader blocked in recv().
        if self.socket is not None:
            try:
                self.socket.shutdown(socket.SHUT_RDWR)
            except OSError as e:
                logger.debug("socket shutdown failed: %s", e)

        with self.write_lock:
            self.output.close()
        self.input.close()

        if self.socket is not None:
            self.socket.close()
