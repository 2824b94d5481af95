''' Wrapper module around :mod:`msgspec` to handle the equivalent of
    :func:`json.loads` and :func:`json.dumps`, plus typed encoding and
    decoding of the structured messages carried by :mod:`protolink`.
'''

import msgspec


# The msgspec 'encode' operation returns bytes. All 'dumps' methods need to
# do so as well, so that callers can write the result straight to a stream.

encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()
dumps = encoder.encode
loads = decoder.decode

DecodeError = msgspec.DecodeError

_decoders = dict()


def decoder_for(type):
    """ Return a cached :class:`msgspec.json.Decoder` that validates its
        input against *type*. Constructing a typed decoder is expensive
        relative to using one, so there is only ever one per type.
    """

    try:
        return _decoders[type]
    except KeyError:
        pass

    typed = msgspec.json.Decoder(type)
    _decoders[type] = typed
    return typed


def decode(data, type=None):
    """ Decode *data*, validating it against *type* if one is provided.
    """

    if type is None:
        return loads(data)

    return decoder_for(type).decode(data)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
