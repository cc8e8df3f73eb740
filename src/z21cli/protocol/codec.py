"""
Converts requests to datagrams and datagrams to events.

Each record on the wire is `[length u16][header u16][data]`, little endian, where length includes the 4 byte prefix.
A single datagram may carry several records. Records with the LAN_X header carry an X-Bus payload that ends with
an XOR checksum over the preceding X-Bus bytes.
"""
import logging
import struct
from functools import reduce

from z21cli.errors import ProtocolError
from z21cli.protocol import messages as m

logger = logging.getLogger(__name__)

_prefix = struct.Struct('<HH')
_system_state = struct.Struct('<hhhhHHBB')
_can_detector = struct.Struct('<HHBBHH')


def xor(data):
    """
    >>> xor(bytes([0x21, 0x81]))
    160
    >>> xor(b'')
    0
    """
    return reduce(lambda a, b: a ^ b, data, 0)


def record(header, data=b''):
    """
    >>> record(0x10)
    b'\\x04\\x00\\x10\\x00'
    """
    return _prefix.pack(len(data) + _prefix.size, header) + bytes(data)


def xbus_record(*xbytes):
    """
    Builds a LAN_X record, appending the checksum.
    >>> xbus_record(0x21, 0x81).hex()
    '070040002181a0'
    """
    data = bytes(xbytes)
    return record(m.LAN_X, data + bytes([xor(data)]))


def _set_track_power(request):
    return xbus_record(0x21, 0x81 if request.on else 0x80)


def _set_broadcast_flags(request):
    return record(m.LAN_SET_BROADCASTFLAGS, struct.pack('<I', request.flags)) + record(m.LAN_GET_BROADCASTFLAGS)


def _can_detector_request(request):
    return record(m.LAN_CAN_DETECTOR, struct.pack('<BH', 0x00, request.network_id))


_encoders = {
    m.GetSerialNumber: lambda r: record(m.LAN_GET_SERIAL_NUMBER),
    m.GetCode: lambda r: record(m.LAN_GET_CODE),
    m.GetHardwareInfo: lambda r: record(m.LAN_GET_HWINFO),
    m.Logoff: lambda r: record(m.LAN_LOGOFF),
    m.GetVersion: lambda r: xbus_record(0x21, 0x21),
    m.GetStatus: lambda r: xbus_record(0x21, 0x24),
    m.SetTrackPower: _set_track_power,
    m.Stop: lambda r: xbus_record(0x80),
    m.GetBroadcastFlags: lambda r: record(m.LAN_GET_BROADCASTFLAGS),
    m.SetBroadcastFlags: _set_broadcast_flags,
    m.GetSystemState: lambda r: record(m.LAN_SYSTEMSTATE_GETDATA),
    m.CanDetectorRequest: _can_detector_request,
}


def encode(request: m.Request) -> bytes:
    encoder = _encoders.get(type(request))
    if encoder is None:
        raise ProtocolError("no encoding for %s" % type(request).__name__)
    return encoder(request)


def _decode_xbus(data):
    if len(data) < 2:
        raise ProtocolError("short X-Bus payload: %s" % data.hex())
    if xor(data[:-1]) != data[-1]:
        raise ProtocolError("X-Bus checksum mismatch: %s" % data.hex())
    xheader, db = data[0], data[1:-1]
    if xheader == 0x61 and db[:1] in (b'\x00', b'\x01'):
        return m.TrackPower(db[0] == 0x01)
    if xheader == 0x62 and len(db) >= 2 and db[0] == 0x22:
        return m.TrackStatus(db[1])
    if xheader == 0x63 and len(db) >= 3 and db[0] == 0x21:
        return m.Version(db[1], db[2])
    if xheader == 0x81 and db[:1] == b'\x00':
        return m.Stopped()
    return m.UnknownMessage(m.LAN_X, bytes(data))


def _decode_system_state(data):
    # older firmware omits the trailing reserved/capabilities bytes
    if len(data) < _system_state.size:
        raise ProtocolError("short system state: %s" % data.hex())
    return m.SystemState(*_system_state.unpack_from(data))


def _decode_can_detector(data):
    if len(data) < _can_detector.size:
        raise ProtocolError("short CAN detector report: %s" % data.hex())
    return m.CanDetector(*_can_detector.unpack_from(data))


def _unpack_u32(data, what):
    if len(data) < 4:
        raise ProtocolError("short %s: %s" % (what, data.hex()))
    return struct.unpack_from('<I', data)[0]


_decoders = {
    m.LAN_GET_SERIAL_NUMBER: lambda d: m.SerialNumber(_unpack_u32(d, 'serial number')),
    m.LAN_GET_CODE: lambda d: m.FeatureCode(d[0]) if d else m.UnknownMessage(m.LAN_GET_CODE, d),
    m.LAN_GET_HWINFO: lambda d: m.HardwareInfo(_unpack_u32(d, 'hardware type'), _unpack_u32(d[4:], 'firmware')),
    m.LAN_X: _decode_xbus,
    m.LAN_GET_BROADCASTFLAGS: lambda d: m.BroadcastFlags(_unpack_u32(d, 'broadcast flags')),
    m.LAN_SYSTEMSTATE_DATACHANGED: _decode_system_state,
    m.LAN_CAN_DETECTOR: _decode_can_detector,
}


def decode(datagram: bytes) -> list:
    """
    Decodes every record in a datagram.
    :return: the events in the order they appear in the datagram.
    """
    events = []
    offset = 0
    while offset < len(datagram):
        if len(datagram) - offset < _prefix.size:
            raise ProtocolError("truncated record at offset %d: %s" % (offset, datagram.hex()))
        length, header = _prefix.unpack_from(datagram, offset)
        if length < _prefix.size or offset + length > len(datagram):
            raise ProtocolError("bad record length %d at offset %d: %s" % (length, offset, datagram.hex()))
        data = bytes(datagram[offset + _prefix.size:offset + length])
        decoder = _decoders.get(header)
        events.append(decoder(data) if decoder else m.UnknownMessage(header, data))
        offset += length
    return events
