"""
Errors surfaced by the z21 client. Each one is handed to the invoking command unchanged; nothing here retries.
"""


class Z21Error(Exception):
    """ base class for all errors raised by the client. """


class ConnectionUnavailableError(Z21Error):
    """ Indicates there is no open connection to the control station. """


class RequestTimeoutError(Z21Error):
    """ No matching reply arrived before the request deadline. """

    def __init__(self, request, timeout):
        super().__init__("no reply to %s within %dms" % (type(request).__name__, round(timeout * 1000)))
        self.request = request
        self.timeout = timeout


class BindFailureError(Z21Error):
    """ The requested local endpoint could not be bound. """

    def __init__(self, endpoint, cause=None):
        host, port = endpoint
        super().__init__("unable to bind local endpoint %s:%d: %s" % (host, port, cause))
        self.endpoint = endpoint


class DeviceNotFoundError(Z21Error):
    """ A single-device scan saw no reports from the requested network id. """

    def __init__(self, network_id):
        super().__init__("no reports from CAN device 0x%04X" % network_id)
        self.network_id = network_id


class TriggerSendError(Z21Error):
    """ The scan trigger could not be sent. """


class ProtocolError(Z21Error):
    """ A datagram could not be decoded. """


class StreamBusyError(Z21Error):
    """ The event stream is already owned by another reader. """


class ProfileError(Z21Error):
    """ A connection profile is missing, duplicated or invalid. """
