from . import fields
from . import message
from . import builder
from . import wire
from . import dispatch

from .message import Envelope, Payload, TagAllocator, next_tag
from .builder import EnvelopeBuilder, PayloadBuilder
from .dispatch import HandlerSet, callback
from .wire import DelimitedCodec, LengthPrefixCodec


"""
protolink Protocol Layer
========================

This package defines the framing and dispatch logic that turns a byte
stream into typed messages. It never opens sockets; the connection layer
hands it already-connected streams.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Application handlers
    │
    ▼
Dispatcher (dispatch.py)
    Exact-type handler registry
    - HandlerSet.on()
    - @callback / HandlerSet.from_object()
    - dispatch(): one call per populated slot, reply only if changed

    │
    ▼
Builders (builder.py)
    Mutable reply accumulators
    - EnvelopeBuilder (tag fixed at creation)
    - PayloadBuilder (bare payloads, no tag)

    │
    ▼
Message Model (message.py)
    Immutable structured messages
    - Envelope (tag + optional payload slots)
    - Payload
    - TagAllocator

    │
    ▼
Framing (wire.py)
    Message <-> bytes on a stream
    - DelimitedCodec: varint length + envelope
    - LengthPrefixCodec: u16 big-endian length + payload

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Connection (protolink.connection)
    Read loop, reply transmission, background thread

Transport (protolink.transport)
    Stream ownership and the write lock shared by every writer

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
