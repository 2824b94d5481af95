"""Transport layer implementations."""

from .base import (
    FrameError,
    FrameTooLarge,
    FrameTruncated,
    Transport,
    TransportClosed,
    TransportError,
)
from .stream import StreamTransport
