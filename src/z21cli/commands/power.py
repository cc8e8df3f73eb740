from z21cli.errors import Z21Error
from z21cli.protocol.messages import SetBroadcastFlags, SetTrackPower, Stop, TRACK_UPDATES


def enable_track_updates(app):
    """ power changes are only reported to clients subscribed to track updates """
    app.request(SetBroadcastFlags(TRACK_UPDATES))


def power_on(app, args):
    enable_track_updates(app)
    if not app.request(SetTrackPower(True)).on:
        raise Z21Error("failed to turn power on")
    app.print("Track power is turned on.")


def power_off(app, args):
    enable_track_updates(app)
    if app.request(SetTrackPower(False)).on:
        raise Z21Error("failed to turn power off")
    app.print("Track power is turned off.")


def power_stop(app, args):
    enable_track_updates(app)
    app.request(Stop())
    app.print("Emergency stop is activated! "
              "The locomotives are stopped but the track voltage remains switched on.")


def register(subparsers):
    parser = subparsers.add_parser('power', help="Manage track and booster power")
    commands = parser.add_subparsers(dest='power_command', metavar='COMMAND')
    commands.required = True
    commands.add_parser('on', help="Turn track power on").set_defaults(handler=power_on)
    commands.add_parser('off', help="Turn track power off").set_defaults(handler=power_off)
    commands.add_parser('stop', aliases=['halt'], help="Emergency stop all locomotives") \
        .set_defaults(handler=power_stop)
