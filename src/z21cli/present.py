"""
Plain text tables and value formatting for command output.
"""
import sys

from z21cli.protocol.messages import FREE, FREE_NOVOLT
from z21cli.ranges import format_ports_as_range


class Table:
    """
    A borderless table. Headers are shown upper case; cells may span several lines.
    """
    def __init__(self, *header):
        self.header = [str(h).upper() for h in header]
        self.rows = []

    def append_row(self, *cells):
        self.rows.append([str(c) for c in cells])
        return self

    def lines(self):
        rows = [self.header] + self.rows
        widths = [max(len(line) for row in rows for line in row[i].splitlines() or ['']) for i in range(len(self.header))]
        result = []
        for row in rows:
            cells = [cell.splitlines() or [''] for cell in row]
            for n in range(max(len(c) for c in cells)):
                parts = [(c[n] if n < len(c) else '').ljust(w) for c, w in zip(cells, widths)]
                result.append('  '.join(parts).rstrip())
        return result

    def render(self, out=None):
        out = out or sys.stdout
        for line in self.lines():
            out.write(line + '\n')


def millivolts_as_volts(mv):
    """
    >>> millivolts_as_volts(18240)
    '18.2'
    >>> millivolts_as_volts(5000)
    '5.0'
    """
    return "%.1f" % round(mv / 1000.0, 1)


def format_network_id(network_id):
    """
    >>> format_network_id(0xc101)
    '0xC101'
    """
    return "0x%04X" % network_id


def format_port_status(status):
    """
    >>> format_port_status(0x0100)
    'free'
    >>> format_port_status(0x1100)
    'busy'
    """
    return "free" if status in (FREE, FREE_NOVOLT) else "busy"


def print_can_devices(devices, out=None):
    out = out or sys.stdout
    if not devices:
        out.write("No devices found\n")
        return
    t = Table("NetID", "Addr", "Port(s)")
    for d in devices.values():
        t.append_row(format_network_id(d.network_id), d.address, format_ports_as_range(d.port_indices))
    t.render(out)


def print_can_device_info(device, out=None):
    out = out or sys.stdout
    if device is None:
        out.write("Device not found\n")
        return
    out.write("Device: %s (address: %d)\n" % (format_network_id(device.network_id), device.address))
    t = Table("Port", "Status")
    for p in device.ports:
        t.append_row(p.index + 1, format_port_status(p.status))
    t.render(out)
