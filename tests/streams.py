""" In-memory stand-ins for socket streams.
"""

import io


class Trickle(io.RawIOBase):
    """ A readable stream that never returns more than *step* bytes from a
        single read() call, the way a socket can.
    """

    def __init__(self, data, step=1):
        self.data = data
        self.offset = 0
        self.step = step

    def readable(self):
        return True

    def read(self, size=-1):
        if size is None or size < 0:
            size = len(self.data)

        size = min(size, self.step)
        chunk = self.data[self.offset:self.offset + size]
        self.offset += len(chunk)
        return chunk


class BrokenOutput(io.RawIOBase):
    """ A writable stream where every write fails as if the peer had gone.
    """

    def writable(self):
        return True

    def write(self, data):
        raise BrokenPipeError('peer went away')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
