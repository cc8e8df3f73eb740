"""
Discovers CAN occupancy detectors by triggering a bus scan and collecting the status reports that follow.

Detectors answer a scan with one status report per port, at their own pace, and there is no way to know how many
reports will come. So discovery watches the event stream for a fixed window and folds every status report seen
in that time into a record per device.
"""
import logging
import time

from z21cli.errors import DeviceNotFoundError, TriggerSendError, Z21Error
from z21cli.protocol.messages import CAN_BROADCAST_NID, CanDetector, CanDetectorRequest
from z21cli.support.mixins import StringerMixin

logger = logging.getLogger(__name__)

DEFAULT_SCAN_TIMEOUT = 2.0


class DetectorPort(StringerMixin):
    def __init__(self, index, status):
        self.index = index      # zero based
        self.status = status

    def __eq__(self, other):
        return isinstance(other, DetectorPort) and (self.index, self.status) == (other.index, other.status)


class Device(StringerMixin):
    """
    A detector on the CAN bus, identified by its network id.
    Ports are kept in the order the reports arrived.
    """
    def __init__(self, network_id, address, ports=None):
        self.network_id = network_id
        self.address = address
        self.ports = list(ports or [])

    @property
    def port_indices(self):
        return [p.index for p in self.ports]


class DiscoveryAggregator:
    """
    :param connection: the connection to scan over. Discovery takes ownership of the event stream while the
        window is open.
    :param window: how long to collect reports, in seconds, from when the scan trigger is sent.
    """

    def __init__(self, connection, window=DEFAULT_SCAN_TIMEOUT, clock=time.monotonic):
        self.connection = connection
        self.window = window
        self._clock = clock

    def scan_all(self) -> dict:
        """
        Scans every device on the bus.
        :return: devices keyed by network id, in the order they were first seen. Empty if none answered.
        """
        return self._scan(CAN_BROADCAST_NID)

    def scan_one(self, network_id) -> Device:
        """
        Scans a single device.
        :raises DeviceNotFoundError: if the device sent no status reports during the window.
        """
        devices = self._scan(network_id)
        device = devices.get(network_id)
        if device is None:
            raise DeviceNotFoundError(network_id)
        return device

    def _scan(self, network_id):
        trigger = CanDetectorRequest(network_id)
        devices = {}
        with self.connection.events().lease() as events:
            try:
                self.connection.send(trigger)
            except (Z21Error, OSError) as e:
                raise TriggerSendError("unable to send CAN scan trigger: %s" % e) from e
            deadline = self._clock() + self.window
            logger.debug("scanning CAN network id 0x%04X for %.1fs" % (network_id, self.window))
            while True:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    break
                event = events.next(remaining)
                if event is not None and trigger.matches(event):
                    self._fold(devices, event)
        logger.debug("scan finished: %d device(s)" % len(devices))
        return devices

    @staticmethod
    def _fold(devices, report: CanDetector):
        """ adds a status report to the device it came from. Repeated reports for a port are all kept. """
        if not report.is_status:
            return
        device = devices.get(report.network_id)
        if device is None:
            device = devices[report.network_id] = Device(report.network_id, report.address)
        device.ports.append(DetectorPort(report.port, report.value1))
