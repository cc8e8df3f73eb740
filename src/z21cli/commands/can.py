import re

from z21cli.errors import DeviceNotFoundError
from z21cli.present import print_can_device_info, print_can_devices
from z21cli.protocol.messages import CanDetectorRequest


def duration(text):
    """
    Parses a duration such as 2s, 500ms, 1m or a plain number of seconds.
    >>> duration('2s')
    2.0
    >>> duration('500ms')
    0.5
    >>> duration('1.5')
    1.5
    """
    match = re.fullmatch(r'\s*(\d+(?:\.\d*)?)\s*(ms|s|m)?\s*', text)
    if not match:
        raise ValueError("invalid duration %r" % text)
    value, unit = float(match.group(1)), match.group(2) or 's'
    if unit == 'ms':
        return value / 1000
    return value * 60 if unit == 'm' else value


def network_id(text):
    """
    >>> hex(network_id('0xC101'))
    '0xc101'
    """
    value = int(text, 0)
    if not 0 <= value <= 0xFFFF:
        raise ValueError("network id out of range: %s" % text)
    return value


def can_discover(app, args):
    discovery = app.discovery(args.timeout)
    app.print("Discover CAN devices (timeout: %gs) ..." % discovery.window)
    print_can_devices(discovery.scan_all(), app.out)


def can_info(app, args):
    try:
        device = app.discovery(args.timeout).scan_one(args.netid)
    except DeviceNotFoundError:
        device = None
    print_can_device_info(device, app.out)


def scan(app, args):
    """ triggers a scan of every detector on the bus without waiting for the reports """
    app.connection.send(CanDetectorRequest())
    app.print("CAN scan triggered")


def register(subparsers):
    subparsers.add_parser('scan', help="Scan CAN Bus").set_defaults(handler=scan)

    parser = subparsers.add_parser('can', help="Manage CAN Bus")
    commands = parser.add_subparsers(dest='can_command', metavar='COMMAND')
    commands.required = True

    discover = commands.add_parser('discover', aliases=['d'], help="Discover and list all CAN devices")
    discover.add_argument('-t', '--timeout', type=duration, help="how long to wait for reports, e.g. 2s")
    discover.set_defaults(handler=can_discover)

    info = commands.add_parser('info', aliases=['i'], help="Show CAN device information")
    info.add_argument('netid', metavar='NETID', type=network_id, help="network id, e.g. 0xC101")
    info.add_argument('-t', '--timeout', type=duration, help="how long to wait for reports, e.g. 2s")
    info.set_defaults(handler=can_info)
