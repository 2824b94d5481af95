from __future__ import annotations

from typing import Any, Dict, Optional, Type

import msgspec

from .. import json
from .message import Envelope, Payload


class EnvelopeBuilder:
    """Mutable accumulator for one :class:`Envelope`.

    The tag is fixed when the builder is created; payload slots may be
    written any number of times before :meth:`build` is called.
    """

    def __init__(self, envelope: Type[Envelope], tag: int = 0):
        self._envelope = envelope
        self._tag = tag
        self._slots: Dict[str, Any] = {}
        self._by_type: Dict[type, list] = {}
        self._accepted: Dict[str, tuple] = dict(envelope.slots())

        for name, accepted in envelope.slots():
            for payload_type in accepted:
                self._by_type.setdefault(payload_type, []).append(name)

    @property
    def tag(self) -> int:
        return self._tag

    # Slot setters
    def put(self, payload: Payload):
        """Store *payload* in the one slot declared for its exact type."""

        names = self._by_type.get(type(payload), ())

        if len(names) == 0:
            raise ValueError(f"{self._envelope.__name__} has no slot for {type(payload).__name__}")
        if len(names) > 1:
            raise ValueError(
                f"{self._envelope.__name__} has several slots for "
                f"{type(payload).__name__}: {', '.join(names)}; use set()"
            )

        self._slots[names[0]] = payload
        return self

    def set(self, name: str, payload: Optional[Payload]):
        if not self._is_slot(name):
            raise AttributeError(f"{self._envelope.__name__} has no slot {name!r}")

        if payload is not None and type(payload) not in self._accepted[name]:
            accepted = ", ".join(payload_type.__name__ for payload_type in self._accepted[name])
            raise TypeError(
                f"{self._envelope.__name__}.{name} accepts {accepted}, not {type(payload).__name__}"
            )

        if payload is None:
            self._slots.pop(name, None)
        else:
            self._slots[name] = payload
        return self

    def clear(self, name: str):
        return self.set(name, None)

    def get(self, name: str) -> Optional[Payload]:
        if not self._is_slot(name):
            raise AttributeError(f"{self._envelope.__name__} has no slot {name!r}")
        return self._slots.get(name)

    def _is_slot(self, name: str) -> bool:
        return name in self._accepted

    # Finalize
    def build(self) -> Envelope:
        return self._envelope(tag=self._tag, **self._slots)

    def fingerprint(self) -> bytes:
        return json.dumps(self.build())


class PayloadBuilder:
    """Reply accumulator for framings that carry a bare payload.

    There is no tag and only a single reply slot.
    """

    def __init__(self):
        self._payload: Optional[msgspec.Struct] = None

    def put(self, payload: Optional[msgspec.Struct]):
        self._payload = payload
        return self

    def get(self) -> Optional[msgspec.Struct]:
        return self._payload

    def build(self) -> Optional[msgspec.Struct]:
        return self._payload

    def fingerprint(self) -> bytes:
        if self._payload is None:
            return b""
        return json.dumps(self._payload)
