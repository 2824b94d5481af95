""" Python implementation of protolink: framing and typed dispatch of
    structured messages over a connected byte stream. This includes the
    wire codecs, the handler registry, and the :class:`Connection` that
    drives them.
"""

# Utility components.

from . import config
from . import json
from . import log

# Submodules used by multiple other components.

from . import transport
from . import protocol

# Primary public-facing interfaces.

from .connection import Connection
from .protocol import Envelope, Payload, HandlerSet, callback
from .transport import FrameError, FrameTruncated, TransportError

configure_logging = log.configure_logging

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
