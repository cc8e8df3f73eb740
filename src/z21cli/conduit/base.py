from abc import abstractmethod


class Conduit:
    """
    A conduit carries whole datagrams in both directions between a local and a remote endpoint.
    """

    @property
    @abstractmethod
    def local_endpoint(self):
        """ the (host, port) the conduit is bound to locally. """
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        """ determines if this conduit is open. When open, datagrams can be sent and received. """
        raise NotImplementedError

    @abstractmethod
    def send(self, data: bytes):
        raise NotImplementedError

    @abstractmethod
    def receive(self, timeout=None):
        """
        Waits for the next datagram.
        :return: the datagram, or None if nothing arrived within the timeout.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self):
        raise NotImplementedError
