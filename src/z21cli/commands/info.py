from z21cli.protocol.messages import GetCode, GetHardwareInfo, GetSerialNumber, GetVersion

# (flag, short option, long option, help), in output order
fields = [
    ('device', '-d', '--device-family', "print the z21 device family"),
    ('hardware', '-i', '--hardware-platform', "print the z21 hardware platform"),
    ('serial', '-S', '--serial', "print the serial number"),
    ('xbus', '-x', '--x-bus-version', "print the X-Bus protocol version"),
    ('firmware', '-f', '--firmware-version', "print the firmware version"),
    ('scope', '-s', '--scope', "print the software feature scope"),
]


def info(app, args):
    sn = app.request(GetSerialNumber())
    version = app.request(GetVersion())
    hwinfo = app.request(GetHardwareInfo())
    code = app.request(GetCode())

    values = {
        'device': version.command_station,
        'hardware': hwinfo.hardware,
        'serial': "%d" % sn.serial_number,
        'xbus': version.xbus,
        'firmware': hwinfo.firmware,
        'scope': "[%s]" % code.scope,
    }
    show_all = args.all or not any(getattr(args, name) for name, _, _, _ in fields)
    app.print(" ".join(values[name] for name, _, _, _ in fields if show_all or getattr(args, name)))


def register(subparsers):
    parser = subparsers.add_parser('info', help="Query system information from the Z21 control station")
    parser.add_argument('-a', '--all', action='store_true',
                        help="print all information, in the following order: device family, hardware platform, "
                             "serial number, X-Bus protocol version, firmware version, feature scope")
    for name, short, long, text in fields:
        parser.add_argument(short, long, dest=name, action='store_true', help=text)
    parser.set_defaults(handler=info)
