import textwrap

from z21cli.errors import Z21Error
from z21cli.present import Table
from z21cli.protocol import messages as m

# (flag, name, description)
subscriptions = [
    (m.TRACK_UPDATES, "TRACK_UPDATES", """\
        Receive broadcasts and info messages concerning driving and switching.
        The following events are concerned:
          - track power (on/off)
          - track programming mode
          - track short circuit
          - emergency stop
          - loco info (loco address must be subscribed too)
          - turnout info"""),
    (m.FEEDBACK_UPDATES, "FEEDBACK_UPDATES", "Receive R-Bus events from feedback devices."),
    (m.RAILCOM_SUB_UPDATES, "RAILCOM_SUB_UPDATES", "Receive RailCom events from subscribed locos."),
    (m.FAST_CLOCK_UPDATES, "FAST_CLOCK_UPDATES", "Receive fast clock time messages (from V1.43)."),
    (m.SYSTEM_UPDATES, "SYSTEM_UPDATES", "Receive Z21 system status updates."),
    (m.LOCO_UPDATES, "LOCO_UPDATES", """\
        Extends TRACK_UPDATES events without having to subscribe
        to the corresponding loco addresses, i.e. for all controlled locos!
        Due to the high network traffic, this flag must be used with caution.
          - V1.20..V1.23: events are sent for all locos
          - V1.24: events are sent only for modified locos"""),
    (m.CAN_BOOSTER_UPDATES, "CAN_BOOSTER_UPDATES", "Receive CAN bus booster events (from V1.41)."),
    (m.RAILCOM_UPDATES, "RAILCOM_UPDATES", """\
        Receive RailCom events without having to subscribe
        to the corresponding loco addresses, i.e. for all controlled locos!
        Due to the high network traffic, this flag must be used with caution.
        (from V1.29)"""),
    (m.CAN_DETECTOR_UPDATES, "CAN_DETECTOR_UPDATES",
     "Receive CAN bus events from track occupancy detectors (from V1.30)."),
    (m.LOCONET_UPDATES, "LOCONET_UPDATES", "Receive LocoNet events excluding loco and switch events (from V1.20)."),
    (m.LOCONET_LOCO_UPDATES, "LOCONET_LOCO_UPDATES", """\
        Receive LocoNet loco events:
          - OPC_LOCO_SPD
          - OPC_LOCO_DIRF
          - OPC_LOCO_SND
          - OPC_LOCO_F912
          - OPC_EXP_CMD
          (from V1.20)"""),
    (m.LOCONET_SWITCH_UPDATES, "LOCONET_SWITCH_UPDATES", """\
        Receive LocoNet switch events:
          - OPC_SW_REQ
          - OPC_SW_REP
          - OPC_SW_ACK
          - OPC_SW_STATE
          (from V1.20)"""),
    (m.LOCONET_DETECTOR_UPDATES, "LOCONET_DETECTOR_UPDATES",
     "Receive LocoNet events from track occupancy detectors (from V1.22)."),
]


def subscription_flag(name):
    """
    >>> hex(subscription_flag('SYSTEM_UPDATES'))
    '0x100'
    """
    for flag, n, _ in subscriptions:
        if n == name:
            return flag
    raise Z21Error("unsupported subscription %r" % name)


def print_subscriptions(app, flags):
    app.print("Bitmap: 0x%08x" % flags.flags)
    t = Table("Name", "Sub (Y/N)", "Description")
    for flag, name, description in subscriptions:
        t.append_row(name, "Yes" if flags.has(flag) else "No", textwrap.dedent(description))
    t.render(app.out)


def sub_list(app, args):
    print_subscriptions(app, app.request(m.GetBroadcastFlags()))


def sub_add(app, args):
    flag = subscription_flag(args.name)
    current = app.request(m.GetBroadcastFlags())
    if current.has(flag):
        app.print("Already subscribed to %r" % args.name)
        return
    app.request(m.SetBroadcastFlags(current.flags | flag))
    app.print("Subscribed to %r" % args.name)


def sub_rm(app, args):
    flag = subscription_flag(args.name)
    current = app.request(m.GetBroadcastFlags())
    if not current.has(flag):
        app.print("Not subscribed to %r" % args.name)
        return
    app.request(m.SetBroadcastFlags(current.flags & ~flag))
    app.print("Unsubscribed from %r" % args.name)


def register(subparsers):
    parser = subparsers.add_parser('sub', help="Manage Z21 subscriptions")
    commands = parser.add_subparsers(dest='sub_command', metavar='COMMAND')
    commands.required = True
    commands.add_parser('list', aliases=['ls'], help="List all subscribed Z21 events").set_defaults(handler=sub_list)
    add = commands.add_parser('add', help="Subscribe to a specific event")
    add.add_argument('name', metavar='NAME')
    add.set_defaults(handler=sub_add)
    rm = commands.add_parser('rm', help="Unsubscribe from a specific event")
    rm.add_argument('name', metavar='NAME')
    rm.set_defaults(handler=sub_rm)
