"""
The inbound event stream of a connection.

Replies and broadcasts arrive interleaved on one queue, and each event is consumed exactly once, in arrival order.
Only one component may read at a time: a reader first takes a lease on the stream, and a second lease while the
first is held is refused. Events that arrive while nobody holds a lease are dropped when the next lease is taken,
so a reader only sees what arrived after it took ownership.
"""
import logging
import threading
from queue import Empty, Queue

from z21cli.errors import StreamBusyError

logger = logging.getLogger(__name__)


class StreamLease:
    """ The right to read from an EventStream. Obtained from EventStream.lease() """

    def __init__(self, stream):
        self._stream = stream
        self._released = False

    def next(self, timeout=None):
        """
        Takes the next event from the stream.
        :param timeout: seconds to wait. None waits indefinitely.
        :return: the next event, or None if none arrived within the timeout.
        """
        if self._released:
            raise StreamBusyError("lease on the event stream has been released")
        return self._stream._get(timeout)

    def __iter__(self):
        """ blocks for each event in turn. The poll interval keeps the caller responsive to interrupts. """
        while not self._released:
            event = self.next(self._stream.poll_interval)
            if event is not None:
                yield event

    def release(self):
        if not self._released:
            self._released = True
            self._stream._release(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


class EventStream:
    """ An unbounded queue of events with a single, explicitly owned reader. """

    poll_interval = 0.2

    def __init__(self):
        self._queue = Queue()
        self._lock = threading.Lock()
        self._owner = None

    def put(self, event):
        self._queue.put(event)

    def lease(self) -> StreamLease:
        """
        Takes ownership of the stream. Events queued before the lease was taken are discarded.
        :raises StreamBusyError: when another reader already holds the stream.
        """
        with self._lock:
            if self._owner is not None:
                raise StreamBusyError("event stream already has a reader")
            self._drain()
            self._owner = StreamLease(self)
            return self._owner

    def _get(self, timeout):
        """ :return: the next event, or None if none arrived within the timeout """
        try:
            return self._queue.get(timeout=timeout if timeout is None else max(timeout, 0))
        except Empty:
            return None

    def _drain(self):
        stale = 0
        while True:
            try:
                self._queue.get_nowait()
            except Empty:
                break
            stale += 1
        if stale:
            logger.debug("dropped %d event(s) received before the lease" % stale)

    @property
    def leased(self):
        return self._owner is not None

    def _release(self, lease):
        with self._lock:
            if self._owner is lease:
                self._owner = None
