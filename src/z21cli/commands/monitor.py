from z21cli.present import millivolts_as_volts
from z21cli.protocol.messages import SystemState, TrackPower


def describe(event):
    """ :return: the monitor line for an event, or None for events the monitor does not show """
    if isinstance(event, SystemState):
        return "[SYS] Main: %-5s Prog: %-5s Temp: %-5s Volt: %-5s (%-5s)" % (
            "%dmA" % event.main_current,
            "%dmA" % event.prog_current,
            "%d°C" % event.temperature,
            "%sV" % millivolts_as_volts(event.supply_voltage),
            "%sV" % millivolts_as_volts(event.vcc_voltage))
    if isinstance(event, TrackPower):
        return "[TRK] Power: %s" % ("ON" if event.on else "OFF")
    return None


def monitor(app, args):
    """ prints broadcasts until the process is interrupted """
    connection = app.connection
    app.print("Waiting for Z21 events ...")
    with connection.events().lease() as events:
        for event in events:
            line = describe(event)
            if line:
                app.print(line)
                app.out.flush()


def register(subparsers):
    subparsers.add_parser('monitor', aliases=['mon'], help="Watch Z21 broadcast events") \
        .set_defaults(handler=monitor)
