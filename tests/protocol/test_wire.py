import io
import pytest

import protolink
from protolink.protocol import wire
from protolink.transport import FrameError, FrameTooLarge, FrameTruncated

from streams import Trickle
from messages import Chat, FileListing, Meta, Ping, Status


def test_varint():

    assert wire.encode_varint(0) == b'\x00'
    assert wire.encode_varint(1) == b'\x01'
    assert wire.encode_varint(127) == b'\x7f'
    assert wire.encode_varint(128) == b'\x80\x01'
    assert wire.encode_varint(300) == b'\xac\x02'

    for value in (0, 1, 127, 128, 300, 65535, 0xFFFFFFFF):
        stream = io.BytesIO(wire.encode_varint(value))
        assert wire.read_varint(stream) == value

    with pytest.raises(ValueError):
        wire.encode_varint(-1)


def test_varint_boundaries():

    assert wire.read_varint(io.BytesIO(b'')) is None

    with pytest.raises(FrameTruncated):
        wire.read_varint(io.BytesIO(b'\x80'))

    with pytest.raises(FrameError):
        wire.read_varint(io.BytesIO(b'\xff' * 6))


def test_delimited_round_trip(codec):

    envelopes = (
        Meta(tag=1, listing=FileListing(path='/tmp', files=['a', 'b'])),
        Meta(tag=2, ping=Ping(sequence=9), status=Status(code='OK', text='fine')),
        Meta(tag=0xFFFFFFFF),
        Meta(),
    )

    stream = io.BytesIO()
    for envelope in envelopes:
        codec.encode(envelope, stream)
    stream.seek(0)

    for envelope in envelopes:
        decoded = codec.decode(stream)
        assert decoded == envelope
        assert list(decoded.payloads()) == list(envelope.payloads())

    assert codec.decode(stream) is None


def test_delimited_frame_layout(codec):

    frame = codec.pack(Meta(tag=7))
    body = frame[1:]

    assert frame[0] == len(body)
    assert protolink.json.loads(body) == {'tag': 7}


def test_delimited_partial_reads(codec):

    envelope = Meta(tag=300, chat=Chat(text='x' * 500))
    stream = Trickle(codec.pack(envelope) + codec.pack(Meta(tag=301)), step=3)

    assert codec.decode(stream) == envelope
    assert codec.decode(stream) == Meta(tag=301)
    assert codec.decode(stream) is None


def test_delimited_truncated(codec):

    frame = codec.pack(Meta(tag=7, status=Status(code='OK')))

    with pytest.raises(FrameTruncated):
        codec.decode(io.BytesIO(frame[:-3]))


def test_delimited_malformed(codec):

    with pytest.raises(FrameError):
        codec.decode(io.BytesIO(b'\x05{"tag'))

    body = b'{"tag":"seven"}'
    with pytest.raises(FrameError):
        codec.decode(io.BytesIO(wire.encode_varint(len(body)) + body))


def test_tag_range(codec):

    for body in (b'{"tag":-5}', b'{"tag":4294967296}', b'{"tag":1099511627775}'):
        with pytest.raises(FrameError):
            codec.decode(io.BytesIO(wire.encode_varint(len(body)) + body))

    body = b'{"tag":4294967295}'
    assert codec.decode(io.BytesIO(wire.encode_varint(len(body)) + body)) == Meta(tag=0xFFFFFFFF)


def test_unencodable(codec):

    with pytest.raises(FrameError):
        codec.pack(Meta(tag=1, status=Status(code=object())))

    raw = wire.LengthPrefixCodec()

    for payload in ('text', 5, None, Ping()):
        with pytest.raises(FrameError):
            raw.pack(payload)

    assert raw.pack(bytearray(b'ab')) == b'\x00\x02ab'

    typed = wire.LengthPrefixCodec(Ping)

    with pytest.raises(FrameError):
        typed.pack(Ping(sequence=object()))


def test_delimited_limit():

    small = wire.DelimitedCodec(Meta, max_frame=16)

    with pytest.raises(FrameTooLarge):
        small.pack(Meta(tag=1, chat=Chat(text='this will not fit')))

    with pytest.raises(FrameTooLarge):
        small.decode(io.BytesIO(wire.encode_varint(17) + b'x' * 17))


def test_length_prefix_raw():

    codec = wire.LengthPrefixCodec()
    stream = io.BytesIO(b'\x00\x05hello')

    payload = codec.decode(stream)
    assert payload == b'hello'
    assert len(payload) == 5
    assert codec.decode(stream) is None

    assert codec.pack(b'hello') == b'\x00\x05hello'
    assert codec.pack(b'') == b'\x00\x00'


def test_length_prefix_truncated():

    codec = wire.LengthPrefixCodec()

    with pytest.raises(FrameTruncated):
        codec.decode(io.BytesIO(b'\x00\x05abc'))

    with pytest.raises(FrameTruncated):
        codec.decode(io.BytesIO(b'\x00'))


def test_length_prefix_partial_reads():

    codec = wire.LengthPrefixCodec()
    stream = Trickle(b'\x01\x00' + b'z' * 256, step=1)

    assert codec.decode(stream) == b'z' * 256
    assert codec.decode(stream) is None


def test_length_prefix_typed():

    codec = wire.LengthPrefixCodec(Ping)
    stream = io.BytesIO()

    codec.encode(Ping(sequence=3), stream)
    codec.encode(Ping(sequence=4), stream)
    stream.seek(0)

    assert codec.decode(stream) == Ping(sequence=3)
    assert codec.decode(stream) == Ping(sequence=4)
    assert codec.decode(stream) is None

    with pytest.raises(FrameError):
        codec.decode(io.BytesIO(b'\x00\x02[]'))


def test_length_prefix_limit():

    codec = wire.LengthPrefixCodec()

    codec.pack(b'y' * 0xFFFF)

    with pytest.raises(FrameTooLarge):
        codec.pack(b'y' * 0x10000)


def test_codec_factory():

    assert isinstance(wire.codec(Meta, protolink.config.DELIMITED), wire.DelimitedCodec)
    assert isinstance(wire.codec(Ping, protolink.config.LENGTH), wire.LengthPrefixCodec)
    assert isinstance(wire.codec(None, protolink.config.LENGTH), wire.LengthPrefixCodec)

    with pytest.raises(ValueError):
        wire.codec(None, protolink.config.DELIMITED)

    with pytest.raises(ValueError):
        wire.codec(Meta, 'carrier-pigeon')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
