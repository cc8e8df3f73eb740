"""
Runs a function repeatedly on a background thread.
"""
import logging
import threading

logger = logging.getLogger(__name__)


class AsyncLoop:
    """
    Calls a function over and over on a daemon thread until stopped.
    An exception raised by the function is logged, and the loop goes on with the next call.

    :param fn: called with no arguments on each pass. It should return within a short time so that a stop
        request is noticed.
    :param name: the name of the background thread
    """

    def __init__(self, fn, name=None, log=logger):
        self.fn = fn
        self.name = name
        self.logger = log
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop.is_set()

    def start(self):
        if self._thread is None:
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()

    def _run(self):
        while not self._stop.is_set():
            try:
                self.fn()
            except Exception as e:
                self.logger.exception(e)
        self.logger.debug("%s exiting" % (self.name or "background loop"))

    def request_stop(self):
        """ ends the loop after the current pass. Can be called from the loop function itself. """
        self._stop.set()

    def stop(self):
        """ ends the loop and waits for the thread to finish, unless called on that thread """
        self.request_stop()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()
