"""
Turns the connection's event stream into request/response calls.
"""
import logging
import time

from z21cli.errors import RequestTimeoutError
from z21cli.protocol.messages import Request

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 0.5


class Correlator:
    """
    Sends a request and waits for its reply.

    The correlator owns the event stream for the duration of one call, so only one request can be in flight on a
    connection. Events that arrive while waiting but do not answer the request are dropped.

    :param connection: the connection the requests are sent over
    :param timeout: seconds to wait for a reply, measured from the send
    """

    def __init__(self, connection, timeout=DEFAULT_REQUEST_TIMEOUT, clock=time.monotonic):
        self.connection = connection
        self.timeout = timeout
        self._clock = clock

    def request(self, request: Request):
        """
        :return: the first event of the request's reply type that matches the request
        :raises RequestTimeoutError: if no matching reply arrives within the timeout
        """
        with self.connection.events().lease() as events:
            self.connection.send(request)
            deadline = self._clock() + self.timeout
            while True:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    raise RequestTimeoutError(request, self.timeout)
                event = events.next(remaining)
                if event is None:
                    continue
                if request.matches(event):
                    return event
                logger.debug("discarded %r while waiting for %s" % (event, type(request).__name__))

    __call__ = request
