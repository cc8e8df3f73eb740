import os
import shutil
import tempfile
import unittest
from io import StringIO
from unittest.mock import Mock, patch

from hamcrest import assert_that, contains_string, is_, starts_with

from z21cli import __version__
from z21cli.app import AppContext
from z21cli.cli import main
from z21cli.commands.monitor import describe
from z21cli.config.config import Settings
from z21cli.config.profiles import ProfileStore, SessionDescriptor
from z21cli.correlator_test import FakeConnection
from z21cli.protocol import messages as m
from z21cli.session import Session


class Station:
    """ answers requests the way a control station with the given state would """

    def __init__(self, power=False, flags=0, detectors=()):
        self.power = power
        self.flags = flags
        self.detectors = list(detectors)

    def __call__(self, request):
        if isinstance(request, m.GetSerialNumber):
            return [m.SerialNumber(27335)]
        if isinstance(request, m.GetVersion):
            return [m.Version(0x30, 0x12)]
        if isinstance(request, m.GetHardwareInfo):
            return [m.HardwareInfo(0x201, 0x143)]
        if isinstance(request, m.GetCode):
            return [m.FeatureCode(m.Z21_NO_LOCK)]
        if isinstance(request, m.GetStatus):
            return [m.TrackStatus(0 if self.power else m.TRACK_VOLTAGE_OFF)]
        if isinstance(request, m.GetSystemState):
            return [m.SystemState(160, 0, 155, 30, 18240, 18224)]
        if isinstance(request, m.SetTrackPower):
            self.power = request.on
            return [m.TrackPower(self.power)]
        if isinstance(request, m.Stop):
            return [m.Stopped()]
        if isinstance(request, m.SetBroadcastFlags):
            self.flags = request.flags
            return [m.BroadcastFlags(self.flags)]
        if isinstance(request, m.GetBroadcastFlags):
            return [m.BroadcastFlags(self.flags)]
        if isinstance(request, m.CanDetectorRequest):
            return [d for d in self.detectors if request.matches(d)]
        return []


class CommandFixture(unittest.TestCase):

    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.store = ProfileStore(os.path.join(self.dir, 'contexts.cfg'))
        self.store.add('home', '192.168.0.111', 21105)
        self.station = Station()
        self.connection = FakeConnection(self.station)
        self.manager = Mock()
        self.manager.connect_current.side_effect = \
            lambda: Session(self.store.load_current(), self.connection, False)
        self.settings = Settings()
        self.settings.request_timeout = 0.05
        self.settings.scan_timeout = 0.05

    def tearDown(self):
        shutil.rmtree(self.dir)

    def run_command(self, *argv):
        """ :return: (exit code, stdout, stderr) """
        out = StringIO()
        app = AppContext(self.settings, self.store, self.manager, out)
        with patch('sys.stderr', new_callable=StringIO) as err:
            code = main(list(argv), app)
        return code, out.getvalue(), err.getvalue()


class CommandTest(CommandFixture):

    def test_version(self):
        assert_that(self.run_command('version'), is_((0, "z21 version %s\n" % __version__, "")))

    def test_command_without_station_does_not_connect(self):
        self.run_command('version')
        self.manager.connect_current.assert_not_called()

    def test_session_closed_after_command(self):
        self.run_command('info')
        assert_that(self.connection.closed, is_(True))

    def test_info_all(self):
        code, out, _ = self.run_command('info')
        assert_that(code, is_(0))
        assert_that(out, is_("Z21 Z21 (black, 2013) 27335 V3.0 1.43 [no lock]\n"))

    def test_info_selected_fields(self):
        _, out, _ = self.run_command('info', '-S', '-f')
        assert_that(out, is_("27335 1.43\n"))

    def test_request_timeout(self):
        self.connection.responder = lambda request: []
        code, out, err = self.run_command('info')
        assert_that(code, is_(1))
        assert_that(err, starts_with("Error: no reply to GetSerialNumber within 50ms"))

    def test_status(self):
        code, out, _ = self.run_command('status')
        assert_that(code, is_(0))
        assert_that(out, contains_string("Track Voltage     OFF"))
        assert_that(out, contains_string("18.2V"))

    def test_status_system(self):
        _, out, _ = self.run_command('status', 'system')
        assert_that(out.splitlines()[0].split(), is_(['MAIN', 'PROG', 'TEMP', 'SUPPLY', 'INTERNAL']))
        assert_that(out, contains_string("160mA"))

    def test_power_on_subscribes_to_track_updates(self):
        code, out, _ = self.run_command('power', 'on')
        assert_that(code, is_(0))
        assert_that(self.connection.requests[:2], is_([m.SetBroadcastFlags(m.TRACK_UPDATES), m.SetTrackPower(True)]))
        assert_that(out, is_("Track power is turned on.\n"))

    def test_power_on_refused(self):
        self.connection.responder = lambda request: \
            [m.TrackPower(False)] if isinstance(request, m.SetTrackPower) else self.station(request)
        code, _, err = self.run_command('power', 'on')
        assert_that(code, is_(1))
        assert_that(err, contains_string("failed to turn power on"))

    def test_power_stop(self):
        code, out, _ = self.run_command('power', 'halt')
        assert_that(code, is_(0))
        assert_that(out, starts_with("Emergency stop is activated!"))

    def test_sub_add_keeps_existing_flags(self):
        self.station.flags = m.TRACK_UPDATES
        code, out, _ = self.run_command('sub', 'add', 'SYSTEM_UPDATES')
        assert_that(code, is_(0))
        assert_that(self.station.flags, is_(m.TRACK_UPDATES | m.SYSTEM_UPDATES))
        assert_that(out, is_("Subscribed to 'SYSTEM_UPDATES'\n"))

    def test_sub_add_already_subscribed(self):
        self.station.flags = m.SYSTEM_UPDATES
        _, out, _ = self.run_command('sub', 'add', 'SYSTEM_UPDATES')
        assert_that(out, is_("Already subscribed to 'SYSTEM_UPDATES'\n"))
        assert_that(self.connection.requests, is_([m.GetBroadcastFlags()]))

    def test_sub_rm(self):
        self.station.flags = m.TRACK_UPDATES | m.SYSTEM_UPDATES
        self.run_command('sub', 'rm', 'TRACK_UPDATES')
        assert_that(self.station.flags, is_(m.SYSTEM_UPDATES))

    def test_sub_unknown(self):
        code, _, err = self.run_command('sub', 'add', 'EVERYTHING')
        assert_that(code, is_(1))
        assert_that(err, contains_string("unsupported subscription"))

    def test_sub_list(self):
        self.station.flags = m.CAN_DETECTOR_UPDATES
        _, out, _ = self.run_command('sub', 'list')
        lines = out.splitlines()
        assert_that(lines[0], is_("Bitmap: 0x00080000"))
        assert_that([l.split()[:2] for l in lines if l.startswith("CAN_DETECTOR_UPDATES")],
                    is_([["CAN_DETECTOR_UPDATES", "Yes"]]))

    def test_can_discover(self):
        self.station.detectors = [m.CanDetector(0xC101, 1, p, m.CAN_TYPE_STATUS, m.FREE) for p in (0, 1, 2, 5)]
        code, out, _ = self.run_command('can', 'discover', '-t', '20ms')
        assert_that(code, is_(0))
        lines = out.splitlines()
        assert_that(lines[0], is_("Discover CAN devices (timeout: 0.02s) ..."))
        assert_that(lines[2].split(), is_(['0xC101', '1', '1-3,6']))

    def test_can_discover_nothing(self):
        _, out, _ = self.run_command('can', 'd')
        assert_that(out.splitlines()[-1], is_("No devices found"))

    def test_can_info(self):
        self.station.detectors = [m.CanDetector(0xC101, 1, 0, m.CAN_TYPE_STATUS, 0x1100),
                                  m.CanDetector(0xC202, 2, 0, m.CAN_TYPE_STATUS, m.FREE)]
        code, out, _ = self.run_command('can', 'info', '0xC101')
        assert_that(code, is_(0))
        assert_that(out.splitlines(), is_(["Device: 0xC101 (address: 1)", "PORT  STATUS", "1     busy"]))

    def test_scan_sends_broadcast_trigger(self):
        code, out, _ = self.run_command('scan')
        assert_that((code, out), is_((0, "CAN scan triggered\n")))
        assert_that(self.connection.requests, is_([m.CanDetectorRequest(m.CAN_BROADCAST_NID)]))

    def test_can_info_not_found(self):
        code, out, _ = self.run_command('can', 'i', '0xC101')
        assert_that((code, out), is_((0, "Device not found\n")))


class ContextCommandTest(CommandFixture):

    def test_add_and_list(self):
        code, out, _ = self.run_command('context', 'add', 'club', '--host', '10.0.0.5')
        assert_that((code, out), is_((0, "Context 'club' added\n")))
        _, out, _ = self.run_command('ctx', 'ls')
        assert_that(out.splitlines(), is_(["(*) home    192.168.0.111:21105",
                                           "( ) club    10.0.0.5:21105"]))

    def test_add_uses_default_host(self):
        self.run_command('ctx', 'add', 'local')
        assert_that(self.store.load('local').host, is_('127.0.0.1'))

    def test_add_duplicate(self):
        code, _, err = self.run_command('ctx', 'add', 'home')
        assert_that(code, is_(1))
        assert_that(err, contains_string("already exists"))

    def test_use_and_show(self):
        self.run_command('ctx', 'add', 'club', '--host', '10.0.0.5', '--port', '21106')
        self.run_command('ctx', 'use', 'club')
        _, out, _ = self.run_command('ctx', 'show')
        assert_that(out, is_("club 10.0.0.5:21106\n"))

    def test_rm(self):
        self.run_command('ctx', 'rm', 'home')
        _, out, _ = self.run_command('ctx', 'list')
        assert_that(out, is_("No contexts saved\n"))

    def test_reset(self):
        self.store.save('home', SessionDescriptor('0.0.0.0', 21106))
        _, out, _ = self.run_command('ctx', 'reset')
        self.manager.reset.assert_called_once_with(self.store.load('home'))
        assert_that(out, is_("Context 'home' reset and session data cleared\n"))

    def test_reset_without_current(self):
        self.store.remove('home')
        _, out, _ = self.run_command('ctx', 'reset')
        assert_that(out, is_("No current context set\n"))
        self.manager.reset.assert_not_called()

    def test_station_command_without_current(self):
        self.store.remove('home')
        app = AppContext(self.settings, self.store, out=StringIO())
        with patch('sys.stderr', new_callable=StringIO) as err:
            code = main(['info'], app)
        assert_that(code, is_(1))
        assert_that(err.getvalue(), contains_string("no current context set"))

    def test_station_command_with_unknown_host(self):
        self.run_command('ctx', 'add', 'bad', '--host', 'no-such-host.invalid')
        self.run_command('ctx', 'use', 'bad')
        app = AppContext(self.settings, self.store, out=StringIO())
        with patch('sys.stderr', new_callable=StringIO) as err:
            code = main(['info'], app)
        assert_that(code, is_(1))
        assert_that(err.getvalue(), starts_with("Error: failed to connect to Z21 at no-such-host.invalid:21105"))
        assert_that(self.store.load('bad').session, is_(None))


class MonitorTest(unittest.TestCase):

    def test_describe_system_state(self):
        line = describe(m.SystemState(160, 0, 155, 30, 18240, 18224))
        assert_that(line, is_("[SYS] Main: 160mA Prog: 0mA   Temp: 30°C  Volt: 18.2V (18.2V)"))

    def test_describe_track_power(self):
        assert_that(describe(m.TrackPower(False)), is_("[TRK] Power: OFF"))

    def test_other_events_not_shown(self):
        assert_that(describe(m.SerialNumber(1)), is_(None))
