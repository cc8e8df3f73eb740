"""
Resumes control station sessions across invocations.

The station keeps per-client state, such as broadcast subscriptions, keyed by the client's UDP endpoint. By
binding to the same local port as last time, a new process picks that state up again instead of starting over.
The local endpoint of the first connection is stored in the profile, and is reused until the profile is reset.
"""
import logging

from z21cli.conduit.udp_conduit import ANY_HOST
from z21cli.config.profiles import Profile, ProfileStore, SessionDescriptor
from z21cli.connection import Connection, connect
from z21cli.errors import Z21Error
from z21cli.protocol.messages import Logoff

logger = logging.getLogger(__name__)


class Session:
    """ An open connection for a profile, and whether it resumed a stored session. """

    def __init__(self, profile: Profile, connection: Connection, resumed: bool):
        self.profile = profile
        self.connection = connection
        self.resumed = resumed

    @property
    def descriptor(self):
        host, port = self.connection.local_endpoint()
        return SessionDescriptor(host, port)

    def close(self):
        self.connection.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class SessionResumeManager:
    """
    Decides the local endpoint for a profile's connection and keeps the profile's session descriptor.

    :param store: where profiles are loaded from and session descriptors saved to
    :param connector: opens a connection, called as connector(host, port, local=(host, port)).
    """

    def __init__(self, store: ProfileStore, connector=connect):
        self.store = store
        self._connect = connector

    @staticmethod
    def local_endpoint(profile: Profile):
        """
        :return: the endpoint to bind, and True if it resumes the stored session
        """
        session = profile.session
        if session is not None and session.local_port and session.local_port > 0:
            return (ANY_HOST, session.local_port), True
        return (ANY_HOST, 0), False

    def connect(self, profile: Profile) -> Session:
        """
        Connects to the profile's station, resuming the stored session when there is one.

        A fresh session's local endpoint is saved to the profile. A resumed session leaves the stored descriptor
        as it is.
        :raises BindFailureError: if the stored local port cannot be bound. The descriptor is kept; reset the
            profile to start afresh.
        """
        local, resumed = self.local_endpoint(profile)
        logger.debug("Z21 context: %s" % profile.name)
        logger.debug("Z21 session: %s" % ("resuming on local port %d ..." % local[1] if resumed else "starting new ..."))
        connection = self._connect(profile.host, profile.port, local=local)
        session = Session(profile, connection, resumed)
        if not resumed:
            try:
                descriptor = session.descriptor
                self.store.save(profile.name, descriptor)
                profile.session = descriptor
            except Exception:
                connection.close()
                raise
            logger.debug("Z21 session: session saved (%s:%d)" % (descriptor.local_host, descriptor.local_port))
        return session

    def connect_current(self) -> Session:
        return self.connect(self.store.load_current())

    def reset(self, profile: Profile):
        """
        Logs the station session off, if it can be reached, and clears the profile's session descriptor.
        The logoff is best effort. The descriptor is cleared even when the old local port can no longer be bound.
        """
        try:
            with self._connect(profile.host, profile.port, local=self.local_endpoint(profile)[0]) as connection:
                connection.send(Logoff())
        except (Z21Error, OSError) as e:
            logger.warning("unable to log off from %s: %s" % (profile.host, e))
        self.store.save(profile.name, None)
        profile.session = None
