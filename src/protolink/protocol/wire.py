""" Framing for structured messages on a byte stream. Two framings are
    available, and a given connection uses exactly one of them:

    :class:`DelimitedCodec`
        [varint length][JSON-encoded envelope]

        The length is an unsigned base-128 varint, as used by protobuf
        delimited streams. The body is a complete :class:`Envelope`.

    :class:`LengthPrefixCodec`
        [u16 big-endian length][payload bytes]

        The body is a single bare payload; there is no tag, and no more than
        one payload type per frame.

    Both codecs return None from :func:`decode` when the stream closes
    cleanly at a frame boundary, and raise
    :class:`protolink.transport.base.FrameTruncated` if it closes anywhere
    else.
"""

import struct

import msgspec

from .. import config
from .. import json
from ..transport.base import FrameError, FrameTooLarge, FrameTruncated
from . import fields


_length_header = struct.Struct(fields.LENGTH_HEADER)


def encode_varint(value):
    """ Return the unsigned base-128 varint encoding of *value*.
    """

    if value < 0:
        raise ValueError('varint value must not be negative: ' + repr(value))

    encoded = bytearray()

    while True:
        byte = value & 0x7F
        value >>= 7

        if value:
            encoded.append(byte | 0x80)
        else:
            encoded.append(byte)
            break

    return bytes(encoded)


def read_varint(stream):
    """ Read one varint from *stream*. Return None if the stream is already
        at its end; a stream that ends part way through the varint is a
        truncated frame.
    """

    value = 0
    shift = 0

    for count in range(fields.VARINT_MAX_BYTES):
        byte = stream.read(1)

        if not byte:
            if count == 0:
                return None
            raise FrameTruncated('stream ended inside a length prefix')

        byte = byte[0]
        value |= (byte & 0x7F) << shift

        if byte & 0x80 == 0:
            return value

        shift += 7

    raise FrameError('length prefix longer than %d bytes' % (fields.VARINT_MAX_BYTES))


def _encode(encoder, message):
    """ Run *encoder* on *message*, reporting anything it cannot represent
        as a :class:`FrameError`.
    """

    try:
        return encoder(message)
    except (TypeError, ValueError, msgspec.EncodeError) as e:
        raise FrameError('cannot encode %s: %s' % (type(message).__name__, e)) from e


def _raw(payload):

    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise TypeError('raw frames carry bytes, not ' + type(payload).__name__)

    return bytes(payload)


def read_exact(stream, count):
    """ Read exactly *count* bytes from *stream*, accumulating short reads.
        A stream that ends before *count* bytes arrive raises
        :class:`FrameTruncated`.
    """

    if count == 0:
        return b''

    chunks = list()
    remaining = count

    while remaining > 0:
        chunk = stream.read(remaining)

        if not chunk:
            received = count - remaining
            raise FrameTruncated('stream ended after %d of %d bytes' % (received, count))

        chunks.append(chunk)
        remaining -= len(chunk)

    return b''.join(chunks)



class DelimitedCodec:
    """ Varint length-prefixed framing of a complete *envelope*, which
        must be a :class:`protolink.protocol.message.Envelope` subclass.
        Frames declaring a body longer than *max_frame* bytes are rejected
        without being read.
    """

    def __init__(self, envelope, max_frame=None):

        if max_frame is None:
            max_frame = config.max_frame

        self.envelope = envelope
        self.max_frame = max_frame
        self.decoder = json.decoder_for(envelope)


    def pack(self, envelope):
        """ Return the complete frame for *envelope* as bytes.
        """

        body = _encode(json.dumps, envelope)

        if len(body) > self.max_frame:
            raise FrameTooLarge('frame of %d bytes exceeds limit of %d' % (len(body), self.max_frame))

        return encode_varint(len(body)) + body


    def unpack(self, body):
        """ Interpret a frame body as an envelope.
        """

        try:
            return self.decoder.decode(body)
        except msgspec.DecodeError as e:
            raise FrameError('malformed envelope: ' + str(e)) from e


    def read_frame(self, stream):
        """ Return the body of the next frame, or None at end of stream.
        """

        length = read_varint(stream)

        if length is None:
            return None

        if length > self.max_frame:
            raise FrameTooLarge('declared length %d exceeds limit of %d' % (length, self.max_frame))

        return read_exact(stream, length)


    def decode(self, stream):
        body = self.read_frame(stream)

        if body is None:
            return None

        return self.unpack(body)


    def encode(self, envelope, stream):
        stream.write(self.pack(envelope))


# end of class DelimitedCodec



class LengthPrefixCodec:
    """ Fixed two-byte length-prefixed framing of a bare payload. If a
        *payload* type is provided the frame body is JSON validated against
        that type; otherwise frames are raw bytes in both directions.
    """

    max_frame = fields.LENGTH_MAX

    def __init__(self, payload=None):

        self.payload = payload

        if payload is None:
            self.decoder = None
        else:
            self.decoder = json.decoder_for(payload)


    def pack(self, payload):

        if self.decoder is None:
            body = _encode(_raw, payload)
        else:
            body = _encode(json.dumps, payload)

        if len(body) > self.max_frame:
            raise FrameTooLarge('frame of %d bytes exceeds limit of %d' % (len(body), self.max_frame))

        return _length_header.pack(len(body)) + body


    def unpack(self, body):

        if self.decoder is None:
            return body

        try:
            return self.decoder.decode(body)
        except msgspec.DecodeError as e:
            raise FrameError('malformed payload: ' + str(e)) from e


    def read_frame(self, stream):

        header = stream.read(_length_header.size)

        if not header:
            return None

        if len(header) < _length_header.size:
            header += read_exact(stream, _length_header.size - len(header))

        length, = _length_header.unpack(header)
        return read_exact(stream, length)


    def decode(self, stream):
        body = self.read_frame(stream)

        if body is None:
            return None

        return self.unpack(body)


    def encode(self, payload, stream):
        stream.write(self.pack(payload))


# end of class LengthPrefixCodec



def codec(message_type, framing=None):
    """ Return a codec for *message_type* using the requested *framing*,
        which defaults to the process-wide :data:`protolink.config.framing`.
        The delimited framing requires an envelope type; the length-prefix
        framing accepts a payload type, or None for raw bytes.
    """

    if framing is None:
        framing = config.framing

    if framing == config.DELIMITED:
        if message_type is None:
            raise ValueError('delimited framing requires an envelope type')
        return DelimitedCodec(message_type)

    if framing == config.LENGTH:
        return LengthPrefixCodec(message_type)

    raise ValueError('unknown framing: ' + repr(framing))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
