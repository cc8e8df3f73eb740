import logging
import socket

from z21cli.conduit.base import Conduit
from z21cli.errors import BindFailureError, ConnectionUnavailableError

logger = logging.getLogger(__name__)

MAX_DATAGRAM = 1472
ANY_HOST = '0.0.0.0'


class UdpConduit(Conduit):
    """
    A conduit over a connected UDP socket.
    :param sock The bound and connected socket
    """
    def __init__(self, sock: socket.socket):
        self.sock = sock

    @property
    def open(self) -> bool:
        return self.sock.fileno() >= 0

    @property
    def local_endpoint(self):
        host, port = self.sock.getsockname()[:2]
        return host, port

    def send(self, data: bytes):
        if not self.open:
            raise ConnectionUnavailableError("conduit is closed")
        try:
            self.sock.send(data)
        except OSError as e:
            raise ConnectionUnavailableError("failed to send to Z21: %s" % e) from e

    def receive(self, timeout=None):
        if not self.open:
            raise ConnectionUnavailableError("conduit is closed")
        self.sock.settimeout(timeout)
        try:
            return self.sock.recv(MAX_DATAGRAM)
        except socket.timeout:
            return None
        except ConnectionRefusedError:
            # an ICMP port unreachable from a previous send; the station may not be up yet
            logger.debug("remote endpoint refused a datagram")
            return None

    def close(self):
        if self.open:
            self.sock.close()


def open_udp_conduit(remote, local=(ANY_HOST, 0)) -> UdpConduit:
    """
    Binds a UDP socket to the local endpoint and connects it to the remote one.
    :param remote: the (host, port) of the control station
    :param local: the (host, port) to bind. Port 0 lets the network stack choose.
    :raises BindFailureError: if the local endpoint cannot be bound
    :raises ConnectionUnavailableError: if the remote host cannot be resolved or reached
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        try:
            sock.bind(local)
        except OSError as e:
            raise BindFailureError(local, e) from e
        try:
            sock.connect(remote)
        except OSError as e:
            host, port = remote
            raise ConnectionUnavailableError("failed to connect to Z21 at %s:%d: %s" % (host, port, e)) from e
    except Exception:
        sock.close()
        raise
    logger.debug("udp socket %s:%d -> %s:%d" % (sock.getsockname()[:2] + tuple(remote)))
    return UdpConduit(sock)
