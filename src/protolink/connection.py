""" A :class:`Connection` ties a framed byte-stream transport to a handler
    registry: every frame read is dispatched, and any reply a handler writes
    is sent straight back on the same connection.

    The simplest use is to subclass :class:`Connection` and mark handler
    methods; the connection is then its own handler set::

        class Listener(Connection):
            envelope = Meta

            @callback(FileListing)
            def on_listing(self, listing, response):
                response.put(Status(code=OK))

        Listener.from_socket(sock).loop()

    An explicit :class:`protolink.protocol.dispatch.HandlerSet` may be
    supplied instead.
"""

import logging
import threading

from .protocol import wire
from .protocol.builder import EnvelopeBuilder
from .protocol.dispatch import HandlerSet, dispatch
from .protocol.message import TagAllocator
from .transport.base import TransportError
from .transport.stream import StreamTransport

logger = logging.getLogger(__name__)


class Connection:
    """ Exchange structured messages over an *input* and *output* byte
        stream pair, both of which are owned by the connection from here on.

        The *codec* defaults to the configured framing for *envelope* (or the
        class attribute of the same name). If no *handlers* are provided they
        are collected from the marked methods of this instance.

        :ivar handlers: The :class:`HandlerSet` used to dispatch frames.
        :ivar tags: The :class:`TagAllocator` for outbound requests.
        :ivar transport: The :class:`StreamTransport` owning both streams.
    """

    envelope = None

    def __init__(self, input, output, handlers=None, codec=None, envelope=None, sock=None):

        if envelope is not None:
            self.envelope = envelope

        if codec is None:
            codec = wire.codec(self.envelope)

        if handlers is None:
            handlers = HandlerSet.from_object(self)

        self.handlers = handlers
        self.tags = TagAllocator()
        self.transport = StreamTransport(input, output, codec, sock=sock)

        self.thread = None
        self.failure = None


    @classmethod
    def from_socket(cls, sock, **kwargs):
        """ Build a :class:`Connection` around an already connected socket.
            Closing the connection closes the socket.
        """

        return cls(sock.makefile('rb'), sock.makefile('wb'), sock=sock, **kwargs)


    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, 'open' if self.transport.is_open else 'closed')


    def new_builder(self):
        """ Return an :class:`EnvelopeBuilder` for a fresh outbound request,
            tagged with the next tag from this connection's allocator.
        """

        if self.envelope is None:
            raise RuntimeError('no envelope type for ' + repr(self))

        return EnvelopeBuilder(self.envelope, self.tags.next())


    def read(self):
        """ Block until one complete frame has been received and return the
            decoded message. Return None if the peer closed the stream
            cleanly between frames.
        """

        return self.transport.recv()


    def loop(self):
        """ Read and dispatch frames until the stream ends. A frame that
            cannot be decoded raises :class:`protolink.transport.FrameError`
            and stops the loop; every other failure is logged and the loop
            carries on with the next frame.
        """

        while True:
            message = self.read()
            if message is None:
                break
            self.callback(message)


    def callback(self, message):
        """ Dispatch one received *message*, and transmit the reply if the
            handlers produced one.
        """

        if message is None:
            return

        reply = dispatch(message, self.handlers)

        if reply is None:
            return

        try:
            self.write(reply)
        except (OSError, TransportError):
            logger.warning('unable to reply to %r', self, exc_info=True)


    def write(self, message):
        """ Encode and flush *message*. This is safe to call from any thread,
            concurrently with the read loop; failures are raised to the
            caller.
        """

        self.transport.send(message)


    def start(self):
        """ Run :func:`loop` in a background daemon thread.
        """

        if self.thread is not None:
            raise RuntimeError('read loop already started for ' + repr(self))

        self.thread = threading.Thread(target=self._run, name=repr(self))
        self.thread.daemon = True
        self.thread.start()
        return self.thread


    def _run(self):

        try:
            self.loop()
        except Exception as e:
            self.failure = e
            logger.error('read loop stopped for %r', self, exc_info=True)


    def join(self, timeout=None):
        """ Wait for the background read loop, if any, to finish. Returns
            True if the loop is no longer running.
        """

        if self.thread is None:
            return True

        self.thread.join(timeout)
        return not self.thread.is_alive()


    def close(self):
        """ Close both streams. A background read loop ends cleanly.
        """

        self.transport.close()


# end of class Connection


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
