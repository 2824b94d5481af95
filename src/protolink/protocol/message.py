""" Class representations of the structured messages exchanged by a
    :class:`protolink.connection.Connection`: the :class:`Payload` base class
    for application-defined messages, the :class:`Envelope` base class that
    carries a correlation tag plus a set of optional payload slots, and the
    :class:`TagAllocator` that hands out correlation tags.

    The concrete schema is always supplied by the application; for example::

        class FileListing(Payload):
            files: list = []

        class Status(Payload):
            code: str

        class Meta(Envelope):
            listing: Optional[FileListing] = None
            status: Optional[Status] = None
"""

import itertools
import threading
import types
import typing
from typing import Annotated

import msgspec

from . import fields


class Payload(msgspec.Struct, omit_defaults=True):
    """ Base class for any application-defined message carried in an
        :class:`Envelope` slot, or carried bare by the length-prefix framing.
    """


# end of class Payload



Tag = Annotated[int, msgspec.Meta(ge=fields.TAG_MIN, le=fields.TAG_MAX)]

_slot_cache = dict()
_union_types = (typing.Union, getattr(types, 'UnionType', typing.Union))


class Envelope(msgspec.Struct, frozen=True, omit_defaults=True, kw_only=True):
    """ The :class:`Envelope` is the outer container for every message
        sent with the delimited framing. The *tag* correlates a reply with
        the request it answers; every other field declared by a subclass is
        a payload slot, which must be optional and default to None.

        Envelopes are immutable once built; use
        :class:`protolink.protocol.builder.EnvelopeBuilder` to assemble one
        a slot at a time.

        :ivar tag: The correlation tag for this envelope, an unsigned 32-bit
            integer.
    """

    tag: Tag = 0

    @classmethod
    def slots(cls):
        """ Return a tuple of (name, types) pairs, one for each payload slot
            declared on this envelope class, in declaration order. The
            *types* element is a tuple of the :class:`msgspec.Struct` classes
            the slot accepts. The result is computed once per class.
        """

        try:
            return _slot_cache[cls]
        except KeyError:
            pass

        slots = list()

        for field in msgspec.structs.fields(cls):
            if field.name == fields.TAG:
                continue

            accepted = _struct_types(field.type)
            if accepted:
                slots.append((field.name, accepted))

        slots = tuple(slots)
        _slot_cache[cls] = slots
        return slots


    def payloads(self):
        """ Iterate over the populated payload slots as (name, payload)
            pairs, in the order the slots are declared on the envelope.
        """

        for name, accepted in self.slots():
            value = getattr(self, name)
            if value is not None:
                yield (name, value)


# end of class Envelope



def _struct_types(annotation):
    """ Return the :class:`msgspec.Struct` classes named by a slot
        annotation, unwrapping Optional[] and other unions.
    """

    if typing.get_origin(annotation) in _union_types:
        candidates = typing.get_args(annotation)
    else:
        candidates = (annotation,)

    accepted = list()
    for candidate in candidates:
        if isinstance(candidate, type) and issubclass(candidate, msgspec.Struct):
            accepted.append(candidate)

    return tuple(accepted)



class TagAllocator:
    """ Hand out correlation tags for outbound requests. Tags are unsigned
        32-bit integers; once the maximum is issued the allocator starts
        over from the minimum. Calls to :func:`next` are safe from any
        number of threads.
    """

    minimum = fields.TAG_MIN
    maximum = fields.TAG_MAX

    def __init__(self, start=None):

        if start is None:
            start = self.minimum

        if start < self.minimum or start > self.maximum:
            raise ValueError('starting tag out of range: ' + repr(start))

        self.lock = threading.Lock()
        self.ticker = itertools.count(start)


    def __iter__(self):
        return self


    def __next__(self):
        return self.next()


    def next(self):
        """ Return the next tag.
        """

        self.lock.acquire()

        try:
            tag = next(self.ticker)

            if tag >= self.maximum:
                self.ticker = itertools.count(self.minimum)

                if tag > self.maximum:
                    # This shouldn't happen, but here we are...
                    tag = next(self.ticker)
        finally:
            self.lock.release()

        return tag


# end of class TagAllocator


_default_allocator = TagAllocator()


def next_tag():
    """ Return the next tag from the process-wide default allocator, for
        callers building envelopes outside of any connection.
    """

    return _default_allocator.next()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
