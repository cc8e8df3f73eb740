import threading
import unittest

from hamcrest import assert_that, calling, is_, none, raises

from z21cli.errors import StreamBusyError
from z21cli.protocol.stream import EventStream


class EventStreamTest(unittest.TestCase):

    def setUp(self):
        self.sut = EventStream()

    def test_events_in_arrival_order(self):
        with self.sut.lease() as events:
            for e in (1, 2, 3):
                self.sut.put(e)
            assert_that([events.next(0), events.next(0), events.next(0)], is_([1, 2, 3]))

    def test_lease_drops_events_queued_before_it(self):
        self.sut.put('stale')
        with self.sut.lease() as events:
            self.sut.put('fresh')
            assert_that([events.next(0), events.next(0)], is_(['fresh', None]))

    def test_next_times_out(self):
        with self.sut.lease() as events:
            assert_that(events.next(0.01), is_(none()))

    def test_negative_timeout_does_not_block(self):
        with self.sut.lease() as events:
            assert_that(events.next(-1), is_(none()))

    def test_each_event_consumed_once(self):
        with self.sut.lease() as events:
            self.sut.put('a')
            assert_that(events.next(0), is_('a'))
        with self.sut.lease() as events:
            assert_that(events.next(0), is_(none()))

    def test_second_lease_refused(self):
        lease = self.sut.lease()
        assert_that(calling(self.sut.lease), raises(StreamBusyError))
        lease.release()
        self.sut.lease().release()

    def test_released_lease_cannot_read(self):
        lease = self.sut.lease()
        lease.release()
        lease.release()
        assert_that(calling(lease.next).with_args(0), raises(StreamBusyError))
        assert_that(self.sut.leased, is_(False))

    def test_stale_lease_release_keeps_new_owner(self):
        old = self.sut.lease()
        old.release()
        new = self.sut.lease()
        old.release()
        assert_that(self.sut.leased, is_(True))
        new.release()

    def test_iteration(self):
        self.sut.poll_interval = 0.01
        received = []
        with self.sut.lease() as events:
            threading.Timer(0.02, self.sut.put, args=('late',)).start()
            self.sut.put('early')
            for event in events:
                received.append(event)
                if len(received) == 2:
                    break
        assert_that(received, is_(['early', 'late']))
