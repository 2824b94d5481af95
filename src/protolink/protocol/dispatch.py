"""Route received payloads to application handlers.

Handlers are looked up by the exact type of each payload in a
:class:`HandlerSet`, which is built once, either by explicit registration::

    handlers = HandlerSet()
    handlers.on(FileListing, on_listing)

or by collecting the methods of an object marked with :func:`callback`.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, Iterator, Optional

import msgspec

from .builder import EnvelopeBuilder, PayloadBuilder
from .message import Envelope

logger = logging.getLogger(__name__)

_MARKER = "_protolink_callback"


def callback(payload_type: type) -> Callable:
    """Mark a method as the handler for *payload_type*.

    Marked methods are collected by :meth:`HandlerSet.from_object`. A method
    may be marked for more than one type by stacking the decorator.
    """

    def mark(function: Callable) -> Callable:
        marked = getattr(function, _MARKER, ())
        setattr(function, _MARKER, marked + (payload_type,))
        return function

    return mark


class Registration:
    """One handler bound to one payload type."""

    def __init__(self, payload_type: Optional[type], function: Callable):
        self.payload_type = payload_type
        self.function = function
        self.wants_builder = _wants_builder(function)

    def __call__(self, payload: Any, builder: Any) -> None:
        if self.wants_builder:
            self.function(payload, builder)
        else:
            self.function(payload)

    def __repr__(self) -> str:
        name = "*" if self.payload_type is None else self.payload_type.__name__
        return f"Registration({name} -> {getattr(self.function, '__qualname__', self.function)!r})"


def _wants_builder(function: Callable) -> bool:
    """True if *function* accepts a second positional argument."""

    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        # Builtins and some C callables have no signature; pass everything.
        return True

    positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind == parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            positional += 1

    if positional == 0:
        raise TypeError(f"handler {function!r} must accept the payload as a positional argument")

    return positional >= 2


class HandlerSet:
    """Exact-type registry of payload handlers.

    Registration order is preserved and visible through iteration. A
    :meth:`fallback` handler, if any, receives payloads of every type that
    has no exact registration.
    """

    def __init__(self):
        self._registry: Dict[type, Registration] = {}
        self._fallback: Optional[Registration] = None

    @classmethod
    def from_object(cls, target: Any) -> "HandlerSet":
        """Build a registry from the :func:`callback` methods of *target*.

        Methods are taken in definition order, most derived class first; a
        method overridden in a subclass is only considered once.
        """

        handlers = cls()
        seen = set()

        for klass in type(target).__mro__:
            for name, attribute in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)

                function = getattr(attribute, "__func__", attribute)
                for payload_type in getattr(function, _MARKER, ()):
                    handlers.on(payload_type, getattr(target, name))

        return handlers

    def on(self, payload_type: type, handler: Optional[Callable] = None):
        """Register *handler* for payloads whose type is exactly *payload_type*.

        Without a *handler* this returns a decorator.
        """

        if handler is None:
            def register(function: Callable) -> Callable:
                self.on(payload_type, function)
                return function
            return register

        if not isinstance(payload_type, type):
            raise TypeError(f"payload type must be a class, not {payload_type!r}")

        if payload_type in self._registry:
            raise ValueError(f"handler already registered for {payload_type.__name__}")

        self._registry[payload_type] = Registration(payload_type, handler)
        return handler

    def fallback(self, handler: Callable) -> Callable:
        """Register *handler* for every payload type with no exact match."""

        if self._fallback is not None:
            raise ValueError("fallback handler already registered")

        self._fallback = Registration(None, handler)
        return handler

    def lookup(self, payload_type: type) -> Optional[Registration]:
        registration = self._registry.get(payload_type)
        if registration is None:
            return self._fallback
        return registration

    def invoke(self, payload: Any, builder: Any) -> bool:
        """Hand *payload* to its handler.

        Returns True if a handler ran to completion. A missing handler or a
        handler that raises is logged and reported as False; neither is
        propagated.
        """

        name = type(payload).__name__
        registration = self.lookup(type(payload))

        if registration is None:
            logger.warning("no handler for %s", name)
            return False

        try:
            registration(payload, builder)
        except Exception:
            logger.warning("handler failed for %s", name, exc_info=True)
            return False

        return True

    def __contains__(self, payload_type: type) -> bool:
        return payload_type in self._registry

    def __iter__(self) -> Iterator[type]:
        return iter(self._registry)

    def __len__(self) -> int:
        return len(self._registry)


def dispatch(incoming: Any, handlers: HandlerSet) -> Optional[Any]:
    """Run every populated payload of *incoming* through *handlers*.

    *incoming* is either an :class:`Envelope`, whose populated slots are
    handled in declaration order and whose reply carries the same tag, or a
    bare payload from the length-prefix framing. The reply is returned only
    if some handler changed it; otherwise the result is None.
    """

    if isinstance(incoming, Envelope):
        builder = EnvelopeBuilder(type(incoming), incoming.tag)
        payloads = [payload for _name, payload in incoming.payloads()]
    else:
        builder = PayloadBuilder()
        payloads = [] if incoming is None else [incoming]

    baseline = builder.fingerprint()

    for payload in payloads:
        handlers.invoke(payload, builder)

    # A handler may have left something in the reply that does not encode.
    try:
        fingerprint = builder.fingerprint()
    except (TypeError, ValueError, msgspec.EncodeError):
        names = ", ".join(type(payload).__name__ for payload in payloads)
        logger.warning("handler failed for %s", names, exc_info=True)
        return None

    if fingerprint == baseline:
        return None

    return builder.build()
