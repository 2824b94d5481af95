import io
import logging
import pytest

from protolink.protocol import wire

from messages import Meta


@pytest.fixture
def codec():
    return wire.DelimitedCodec(Meta)


@pytest.fixture
def frames(codec):
    """ Return a function packing any number of envelopes into one
        readable in-memory stream.
    """

    def pack(*envelopes):
        return io.BytesIO(b''.join(codec.pack(envelope) for envelope in envelopes))

    return pack


@pytest.fixture
def reports(caplog):
    caplog.set_level(logging.WARNING, logger='protolink')
    return caplog


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
