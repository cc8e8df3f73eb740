import logging

from z21cli.conduit.base import Conduit
from z21cli.conduit.udp_conduit import ANY_HOST, open_udp_conduit
from z21cli.errors import ConnectionUnavailableError, ProtocolError
from z21cli.protocol import codec
from z21cli.protocol.loop import AsyncLoop
from z21cli.protocol.messages import Request
from z21cli.protocol.stream import EventStream
from z21cli.support.events import EventSource

logger = logging.getLogger(__name__)

DEFAULT_PORT = 21105


class Connection:
    """
    A connection to a control station over a conduit.

    Requests are encoded and sent synchronously. A background thread pumps datagrams from the conduit, decodes
    them and appends the events to the event stream. Listeners on `sent` and `received` see every request and
    event as it passes.

    :param conduit: the open conduit to the station
    """

    receive_timeout = 0.1

    def __init__(self, conduit: Conduit):
        self._conduit = conduit
        self._events = EventStream()
        self.sent = EventSource()
        self.received = EventSource()
        self._pump = AsyncLoop(self.pump, name='z21-pump', log=logger)
        self._closed = False

    def start(self):
        self._pump.start()
        return self

    @property
    def closed(self):
        return self._closed or not self._conduit.open

    def send(self, request: Request):
        """
        Sends a request without waiting for any reply.
        :raises ConnectionUnavailableError: if the connection is closed
        """
        if self.closed:
            raise ConnectionUnavailableError("connection to the control station is closed")
        data = codec.encode(request)
        self.sent.fire(request)
        self._conduit.send(data)

    def events(self) -> EventStream:
        return self._events

    def local_endpoint(self):
        return self._conduit.local_endpoint

    def pump(self):
        """ reads one datagram, if any, and queues its events. Called repeatedly on the background thread. """
        if self.closed:
            self._pump.request_stop()
            return
        data = self._conduit.receive(self.receive_timeout)
        if not data:
            return
        try:
            events = codec.decode(data)
        except ProtocolError as e:
            logger.warning("dropped datagram: %s" % e)
            return
        for event in events:
            self.received.fire(event)
            self._events.put(event)

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._pump.stop()
        self._conduit.close()
        logger.debug("connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def connect(host, port=DEFAULT_PORT, local=(ANY_HOST, 0)) -> Connection:
    """
    Opens a started connection to the station at host:port from the given local endpoint.
    :raises BindFailureError: if the local endpoint cannot be bound
    """
    conduit = open_udp_conduit((host, port), local)
    return Connection(conduit).start()
