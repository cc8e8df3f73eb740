from z21cli.present import Table, millivolts_as_volts
from z21cli.protocol.messages import EMERGENCY_STOP, GetStatus, GetSystemState, PROGRAMMING_MODE_ACTIVE, \
    SHORT_CIRCUIT, TRACK_VOLTAGE_OFF

# (flag, description, (state when clear, state when set))
track_states = [
    (EMERGENCY_STOP, "Emergency Stop", ("OFF", "ON")),
    (TRACK_VOLTAGE_OFF, "Track Voltage", ("ON", "OFF")),
    (SHORT_CIRCUIT, "Short Circuit", ("OFF", "ON")),
    (PROGRAMMING_MODE_ACTIVE, "Programming Mode", ("INACTIVE", "ACTIVE")),
]


def print_track_status(app, status):
    t = Table("Track", "Status (0x%02x)" % status.mask)
    for flag, description, states in track_states:
        t.append_row(description, states[status.has(flag)])
    t.render(app.out)


def print_system_status(app, state):
    t = Table("Main", "Prog", "Temp", "Supply", "Internal")
    t.append_row("%dmA" % state.main_current,
                 "%dmA" % state.prog_current,
                 "%d°C" % state.temperature,
                 "%sV" % millivolts_as_volts(state.supply_voltage),
                 "%sV" % millivolts_as_volts(state.vcc_voltage))
    t.render(app.out)


def status(app, args):
    track = app.request(GetStatus())
    system = app.request(GetSystemState())
    print_track_status(app, track)
    app.print("")
    print_system_status(app, system)


def status_track(app, args):
    print_track_status(app, app.request(GetStatus()))


def status_system(app, args):
    print_system_status(app, app.request(GetSystemState()))


def register(subparsers):
    parser = subparsers.add_parser('status', help="Show current Z21 status")
    parser.set_defaults(handler=status)
    commands = parser.add_subparsers(dest='status_command', metavar='COMMAND')
    commands.add_parser('track', help="Show track status").set_defaults(handler=status_track)
    commands.add_parser('system', help="Show system status").set_defaults(handler=status_system)
