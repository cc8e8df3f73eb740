import threading
import unittest
from unittest.mock import Mock

import timeout_decorator
from hamcrest import assert_that, greater_than, is_

from z21cli.correlator_test import debug_timeout
from z21cli.protocol.loop import AsyncLoop


class AsyncLoopTest(unittest.TestCase):

    @timeout_decorator.timeout(debug_timeout(2))
    def test_runs_until_stopped(self):
        called = threading.Event()
        fn = Mock(side_effect=lambda: called.set())
        sut = AsyncLoop(fn, name='test-loop')
        sut.start()
        called.wait()
        assert_that(sut.running, is_(True))
        sut.stop()
        assert_that(sut.running, is_(False))
        count = fn.call_count
        assert_that(count, is_(greater_than(0)))
        assert_that(fn.call_count, is_(count))

    @timeout_decorator.timeout(debug_timeout(2))
    def test_exceptions_do_not_end_the_loop(self):
        calls = []
        done = threading.Event()

        def fn():
            calls.append(1)
            if len(calls) < 3:
                raise ValueError("boom")
            done.set()

        log = Mock()
        sut = AsyncLoop(fn, log=log)
        sut.start()
        done.wait()
        sut.stop()
        assert_that(log.exception.call_count, is_(2))

    @timeout_decorator.timeout(debug_timeout(2))
    def test_loop_can_stop_itself(self):
        sut = None

        def fn():
            sut.request_stop()

        sut = AsyncLoop(fn)
        sut.start()
        sut._thread.join()
        sut.stop()
        assert_that(sut.running, is_(False))

    def test_stop_without_start(self):
        sut = AsyncLoop(Mock())
        sut.stop()
        assert_that(sut.running, is_(False))
