"""Tests for HazardMonitor scheduling and SimulatedHazardSource."""

import itertools
import random
import threading
import time
from unittest.mock import MagicMock

import pytest

from escalation import ThreadingScheduler
from hazard_detection import HAZARD_CATALOG, HazardMonitor, Severity, SimulatedHazardSource
from hazard_detection.events import FIRST_INTERVAL, REPEAT_INTERVAL

from conftest import FixedSource


@pytest.fixture
def sink():
    return MagicMock()


def make_monitor(sink, scheduler, store, source=None):
    return HazardMonitor(sink, scheduler, store, source=source or FixedSource(6.0))


class TestHazardMonitor:
    """Test cases for HazardMonitor."""

    def test_single_emission_at_six_seconds(self, sink, scheduler, store):
        monitor = make_monitor(sink, scheduler, store)
        monitor.start()

        scheduler.advance(5.0)
        assert sink.present.call_count == 0

        scheduler.advance(1.0)
        assert sink.present.call_count == 1

    def test_stop_before_interval_prevents_emission(self, sink, scheduler, store):
        monitor = make_monitor(sink, scheduler, store)
        monitor.start()

        scheduler.advance(3.0)
        assert monitor.stop() is True
        scheduler.advance(600.0)

        assert sink.present.call_count == 0
        assert scheduler.pending == 0

    def test_emissions_repeat_while_armed(self, sink, scheduler, store):
        monitor = make_monitor(sink, scheduler, store)
        monitor.start()

        scheduler.advance(30.0)

        assert sink.present.call_count == 5
        assert monitor.emitted == 5

    def test_stop_after_emissions(self, sink, scheduler, store):
        monitor = make_monitor(sink, scheduler, store)
        monitor.start()
        scheduler.advance(13.0)
        monitor.stop()
        scheduler.advance(100.0)

        assert sink.present.call_count == 2

    def test_restart_begins_new_sequence(self, sink, scheduler, store):
        source = FixedSource(6.0)
        source.intervals = MagicMock(side_effect=lambda: itertools.repeat(6.0))
        monitor = make_monitor(sink, scheduler, store, source)

        monitor.start()
        scheduler.advance(4.0)
        monitor.stop()
        monitor.start()
        scheduler.advance(4.0)
        assert sink.present.call_count == 0

        scheduler.advance(2.0)
        assert sink.present.call_count == 1
        assert source.intervals.call_count == 2

    def test_start_twice_keeps_one_schedule(self, sink, scheduler, store):
        monitor = make_monitor(sink, scheduler, store)

        assert monitor.start() is True
        assert monitor.start() is False
        scheduler.advance(6.0)

        assert sink.present.call_count == 1

    def test_arm_state_persisted(self, sink, scheduler, store):
        monitor = make_monitor(sink, scheduler, store)

        monitor.start()
        assert store.is_monitor_armed() is True
        monitor.stop()
        assert store.is_monitor_armed() is False

    def test_stop_when_not_armed(self, sink, scheduler, store):
        assert make_monitor(sink, scheduler, store).stop() is False

    def test_sink_error_does_not_break_schedule(self, sink, scheduler, store):
        sink.present.side_effect = [RuntimeError("display gone"), None]
        monitor = make_monitor(sink, scheduler, store)
        monitor.start()

        scheduler.advance(12.0)

        assert sink.present.call_count == 2

    def test_emit_forwards_event(self, sink, scheduler, store):
        source = FixedSource(6.0)
        monitor = make_monitor(sink, scheduler, store, source)

        event = monitor.emit()

        assert event is source.event
        sink.present.assert_called_once_with(source.event)


class TestHazardMonitorWithTimers:
    """HazardMonitor on real timer threads."""

    def test_stop_during_inflight_emission(self, sink, store):
        entered = threading.Event()
        release = threading.Event()

        class BlockingSource(FixedSource):
            def next_event(self):
                entered.set()
                release.wait(timeout=5)
                return self.event

        monitor = make_monitor(sink, ThreadingScheduler(), store, BlockingSource(interval=0.01))
        monitor.start()
        assert entered.wait(timeout=2)

        presented_at_stop = []

        def stop_monitor():
            monitor.stop()
            presented_at_stop.append(sink.present.call_count)

        stopper = threading.Thread(target=stop_monitor)
        stopper.start()
        # stop() waits for the emission holding the monitor lock.
        stopper.join(timeout=0.1)
        assert stopper.is_alive()

        release.set()
        stopper.join(timeout=2)
        assert not stopper.is_alive()

        time.sleep(0.2)

        assert presented_at_stop[0] >= 1
        assert sink.present.call_count == presented_at_stop[0]
        assert monitor.armed is False
        assert store.is_monitor_armed() is False


class TestSimulatedHazardSource:
    """Test cases for the seeded random source."""

    def test_interval_ranges(self):
        source = SimulatedHazardSource(random.Random(1234))
        for _ in range(50):
            intervals = source.intervals()
            first = next(intervals)
            assert FIRST_INTERVAL[0] <= first < FIRST_INTERVAL[1]
            for delay in itertools.islice(intervals, 20):
                assert REPEAT_INTERVAL[0] <= delay < REPEAT_INTERVAL[1]

    def test_same_seed_same_schedule(self):
        a = SimulatedHazardSource(random.Random(7))
        b = SimulatedHazardSource(random.Random(7))

        assert list(itertools.islice(a.intervals(), 10)) == list(itertools.islice(b.intervals(), 10))
        assert [a.next_event() for _ in range(10)] == [b.next_event() for _ in range(10)]

    def test_events_come_from_catalog(self):
        source = SimulatedHazardSource(random.Random(3))
        seen = {source.next_event() for _ in range(500)}

        assert seen == set(HAZARD_CATALOG)

    def test_catalog_contents(self):
        by_type = {event.type: event.severity for event in HAZARD_CATALOG}
        assert by_type == {
            'Vehicle Approaching': Severity.HIGH,
            'Emergency Siren': Severity.MEDIUM,
            'Construction Noise': Severity.LOW,
            'Horn Honking': Severity.HIGH,
            'Alarm Bell': Severity.MEDIUM,
        }

    def test_seeded_monitor_schedule(self, scheduler, store):
        sink = MagicMock()
        monitor = HazardMonitor(sink, scheduler, store, source=SimulatedHazardSource(random.Random(99)))
        expected = next(SimulatedHazardSource(random.Random(99)).intervals())

        monitor.start()
        scheduler.advance(expected - 0.01)
        assert sink.present.call_count == 0
        scheduler.advance(0.02)
        assert sink.present.call_count == 1
