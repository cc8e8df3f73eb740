import logging
import sys

from z21cli.config.config import Settings
from z21cli.config.profiles import ProfileStore
from z21cli.correlator import Correlator
from z21cli.discovery import DiscoveryAggregator
from z21cli.errors import ConnectionUnavailableError
from z21cli.session import SessionResumeManager

logger = logging.getLogger(__name__)


class AppContext:
    """
    What a command runs with: settings, the profile store, and the session to the station.
    The session is opened on first use and closed by close(), whatever the outcome of the command.
    """

    def __init__(self, settings: Settings, store: ProfileStore = None, manager: SessionResumeManager = None,
                 out=None):
        self.settings = settings
        self.store = store or ProfileStore(settings.contexts_path)
        self.manager = manager or SessionResumeManager(self.store)
        self.out = out or sys.stdout
        self._session = None

    @property
    def session(self):
        if self._session is None:
            self._session = self.manager.connect_current()
            if logger.isEnabledFor(logging.DEBUG):
                connection = self._session.connection
                connection.sent.add(lambda request: logger.debug("-> %r" % request))
                connection.received.add(lambda event: logger.debug("<- %r" % event))
        return self._session

    @property
    def connection(self):
        connection = self.session.connection
        if connection is None or connection.closed:
            raise ConnectionUnavailableError("Z21 connection not initialized")
        return connection

    def request(self, request):
        return Correlator(self.connection, self.settings.request_timeout).request(request)

    def discovery(self, window=None):
        return DiscoveryAggregator(self.connection, self.settings.scan_timeout if window is None else window)

    def print(self, *lines):
        for line in lines:
            self.out.write(line + '\n')

    def close(self):
        session, self._session = self._session, None
        if session is not None:
            session.close()
