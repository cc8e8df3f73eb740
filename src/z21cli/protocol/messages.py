"""
The messages exchanged with a Z21 control station.

Requests are sent by the client. Events arrive on the connection's event stream: some are replies to a request,
others are unsolicited broadcasts, and both share the same set of types. Each request names the event type that
answers it (`reply_type`), and may narrow the match further via `matches()`.
"""
from z21cli.support.mixins import CommonEqualityMixin, StringerMixin

# LAN headers
LAN_GET_SERIAL_NUMBER = 0x10
LAN_GET_CODE = 0x18
LAN_GET_HWINFO = 0x1A
LAN_LOGOFF = 0x30
LAN_X = 0x40
LAN_SET_BROADCASTFLAGS = 0x50
LAN_GET_BROADCASTFLAGS = 0x51
LAN_SYSTEMSTATE_DATACHANGED = 0x84
LAN_SYSTEMSTATE_GETDATA = 0x85
LAN_CAN_DETECTOR = 0xC4

CAN_BROADCAST_NID = 0xD000
CAN_TYPE_STATUS = 0x01

# occupancy values reported by a detector port (value1 of a status report)
FREE_NOVOLT = 0x0000
FREE = 0x0100

# central state bits
EMERGENCY_STOP = 0x01
TRACK_VOLTAGE_OFF = 0x02
SHORT_CIRCUIT = 0x04
PROGRAMMING_MODE_ACTIVE = 0x20

# broadcast flags
TRACK_UPDATES = 0x00000001
FEEDBACK_UPDATES = 0x00000002
RAILCOM_SUB_UPDATES = 0x00000004
FAST_CLOCK_UPDATES = 0x00000010
SYSTEM_UPDATES = 0x00000100
LOCO_UPDATES = 0x00010000
CAN_BOOSTER_UPDATES = 0x00020000
RAILCOM_UPDATES = 0x00040000
CAN_DETECTOR_UPDATES = 0x00080000
LOCONET_UPDATES = 0x01000000
LOCONET_LOCO_UPDATES = 0x02000000
LOCONET_SWITCH_UPDATES = 0x04000000
LOCONET_DETECTOR_UPDATES = 0x08000000

# feature scope codes
Z21_NO_LOCK = 0x00
Z21_START_LOCKED = 0x01
Z21_START_UNLOCKED = 0x02

HARDWARE_TYPES = {
    0x00000200: "Z21 (black, 2012)",
    0x00000201: "Z21 (black, 2013)",
    0x00000202: "SmartRail",
    0x00000203: "z21 (white)",
    0x00000204: "z21start",
    0x00000205: "10806 Single Booster",
    0x00000206: "10807 Dual Booster",
    0x00000211: "10870 Z21 XL",
    0x00000212: "10869 XL Booster",
    0x00000301: "10836 Switch Decoder",
    0x00000302: "10836 Signal Decoder",
}

COMMAND_STATION_IDS = {
    0x12: "Z21",
}


def bcd(value):
    """
    decodes a single binary coded decimal byte.
    >>> bcd(0x43)
    43
    """
    return (value >> 4) * 10 + (value & 0x0F)


class Message(CommonEqualityMixin, StringerMixin):
    """ base class of everything that travels over the connection. """


class Event(Message):
    """ A message received from the control station, either a reply or a broadcast. """


class Request(Message):
    """ A message sent to the control station. """

    reply_type = None

    def matches(self, event: Event) -> bool:
        """ determines if the given event is the reply to this request. """
        return self.reply_type is not None and type(event) is self.reply_type


# ---------- events ----------

class SerialNumber(Event):
    def __init__(self, serial_number):
        self.serial_number = serial_number


class FeatureCode(Event):
    def __init__(self, code):
        self.code = code

    @property
    def scope(self):
        return {
            Z21_NO_LOCK: "no lock",
            Z21_START_LOCKED: "locked",
            Z21_START_UNLOCKED: "unlocked",
        }.get(self.code, "unknown")


class HardwareInfo(Event):
    def __init__(self, hardware_type, firmware_version):
        self.hardware_type = hardware_type
        self.firmware_version = firmware_version

    @property
    def hardware(self):
        return HARDWARE_TYPES.get(self.hardware_type, "unknown (0x%08X)" % self.hardware_type)

    @property
    def firmware(self):
        """ The firmware version is BCD encoded, 0x0143 is V1.43 """
        return "%d.%02d" % (bcd((self.firmware_version >> 8) & 0xFF), bcd(self.firmware_version & 0xFF))


class Version(Event):
    def __init__(self, xbus_version, command_station_id):
        self.xbus_version = xbus_version
        self.command_station_id = command_station_id

    @property
    def xbus(self):
        return "V%d.%d" % (self.xbus_version >> 4, self.xbus_version & 0x0F)

    @property
    def command_station(self):
        return COMMAND_STATION_IDS.get(self.command_station_id, "0x%02X" % self.command_station_id)


class TrackStatus(Event):
    def __init__(self, mask):
        self.mask = mask

    def has(self, flag):
        return bool(self.mask & flag)


class TrackPower(Event):
    def __init__(self, on):
        self.on = on


class Stopped(Event):
    pass


class BroadcastFlags(Event):
    def __init__(self, flags):
        self.flags = flags

    def has(self, flag):
        return bool(self.flags & flag)


class SystemState(Event):
    def __init__(self, main_current, prog_current, filtered_main_current, temperature,
                 supply_voltage, vcc_voltage, central_state=0, central_state_ex=0):
        self.main_current = main_current                    # mA
        self.prog_current = prog_current                    # mA
        self.filtered_main_current = filtered_main_current  # mA
        self.temperature = temperature                      # degrees C
        self.supply_voltage = supply_voltage                # mV
        self.vcc_voltage = vcc_voltage                      # mV
        self.central_state = central_state
        self.central_state_ex = central_state_ex


class CanDetector(Event):
    """ A report from a CAN occupancy detector. With type CAN_TYPE_STATUS, value1 is the occupancy of the port. """
    def __init__(self, network_id, address, port, type, value1=0, value2=0):
        self.network_id = network_id
        self.address = address
        self.port = port
        self.type = type
        self.value1 = value1
        self.value2 = value2

    @property
    def is_status(self):
        return self.type == CAN_TYPE_STATUS


class UnknownMessage(Event):
    """ Anything the decoder does not recognize. Never the reply to a request. """
    def __init__(self, header, payload):
        self.header = header
        self.payload = payload


# ---------- requests ----------

class GetSerialNumber(Request):
    reply_type = SerialNumber


class GetCode(Request):
    reply_type = FeatureCode


class GetHardwareInfo(Request):
    reply_type = HardwareInfo


class GetVersion(Request):
    reply_type = Version


class GetStatus(Request):
    reply_type = TrackStatus


class SetTrackPower(Request):
    reply_type = TrackPower

    def __init__(self, on):
        self.on = on


class Stop(Request):
    reply_type = Stopped


class GetBroadcastFlags(Request):
    reply_type = BroadcastFlags


class SetBroadcastFlags(Request):
    """ The station does not acknowledge a flags write, so the write is followed by a read and
        the read-back is the reply. """
    reply_type = BroadcastFlags

    def __init__(self, flags):
        self.flags = flags


class GetSystemState(Request):
    reply_type = SystemState


class CanDetectorRequest(Request):
    reply_type = CanDetector

    def __init__(self, network_id=CAN_BROADCAST_NID):
        self.network_id = network_id

    def matches(self, event):
        if not super().matches(event):
            return False
        return self.network_id == CAN_BROADCAST_NID or event.network_id == self.network_id


class Logoff(Request):
    """ Ends the session on the station. No reply is sent. """
