"""Transport interface.

This is the (small) contract that a byte-stream transport follows. It lives
outside :mod:`protolink.protocol` so the protocol remains transport-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class FrameError(TransportError):
    """A frame on the wire could not be decoded."""


class FrameTruncated(FrameError):
    """The stream ended part way through a frame."""


class FrameTooLarge(FrameError):
    """A frame exceeds the maximum length the framing allows."""


class TransportClosed(TransportError):
    """The transport has already been closed."""


class Transport(ABC):
    """Minimal contract for a framed message transport."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying streams."""

    @abstractmethod
    def send(self, msg: Any) -> None:
        """Encode and transmit one message."""

    @abstractmethod
    def recv(self) -> Optional[Any]:
        """Receive the next message, or None at a clean end of stream."""

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently usable."""
        return False
