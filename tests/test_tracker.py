"""Tests for the connection state tracker: interval bracketing and thread safety."""

import threading

import pytest

from reconnbench.collection import IntervalCollection
from reconnbench.models import ConnectionState
from reconnbench.tracker import ConnectionStateTracker


class StepClock:
    """Clock that returns whatever `now` was last set to."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_tracker(clock=None, on_transition=None):
    collection = IntervalCollection()
    tracker = ConnectionStateTracker(
        collection,
        clock=clock or StepClock(),
        on_transition=on_transition,
    )
    return tracker, collection


def feed(tracker, clock, signals):
    for index, ok in enumerate(signals, start=1):
        clock.now = float(index)
        if ok:
            tracker.report_success()
        else:
            tracker.report_failure()


class TestTransitions:
    def test_starts_connected(self):
        tracker, collection = make_tracker()
        assert tracker.state == ConnectionState.CONNECTED
        assert tracker.is_connected
        assert len(collection) == 0

    def test_success_while_connected_is_noop(self):
        tracker, collection = make_tracker()
        assert tracker.report_success() is None
        assert tracker.report_success() is None
        assert tracker.is_connected
        assert tracker.transitions == 0
        assert len(collection) == 0

    def test_failure_opens_interval_once(self):
        tracker, collection = make_tracker()
        assert tracker.report_failure() is True
        assert tracker.report_failure() is False
        assert tracker.report_failure() is False
        assert tracker.state == ConnectionState.DISCONNECTED
        assert tracker.transitions == 1
        # Open intervals are never visible in the collection.
        assert len(collection) == 0

    def test_success_closes_interval(self):
        clock = StepClock()
        tracker, collection = make_tracker(clock)
        clock.now = 10.0
        tracker.report_failure()
        clock.now = 12.5
        interval = tracker.report_success()

        assert interval is not None
        assert interval.start == 10.0
        assert interval.end == 12.5
        assert interval.duration == pytest.approx(2.5)
        assert interval.ended_at >= interval.started_at
        assert collection.snapshot() == [interval]
        assert tracker.is_connected

    def test_first_operation_failing_opens_interval(self):
        clock = StepClock()
        tracker, collection = make_tracker(clock)
        feed(tracker, clock, [False, True])
        intervals = collection.snapshot()
        assert len(intervals) == 1
        assert (intervals[0].start, intervals[0].end) == (1.0, 2.0)

    def test_end_to_end_signal_sequence(self):
        clock = StepClock()
        tracker, collection = make_tracker(clock)
        feed(tracker, clock, [True, False, False, True, True, False, True])

        intervals = collection.snapshot()
        assert len(intervals) == 2
        assert (intervals[0].start, intervals[0].end) == (2.0, 4.0)
        assert (intervals[1].start, intervals[1].end) == (6.0, 7.0)

    def test_open_interval_at_end_is_not_counted(self):
        clock = StepClock()
        tracker, collection = make_tracker(clock)
        feed(tracker, clock, [False, True, False, False])
        assert len(collection) == 1
        assert tracker.state == ConnectionState.DISCONNECTED

    def test_interval_count_matches_cycles(self):
        import random

        rng = random.Random(7)
        signals = [rng.random() < 0.6 for _ in range(2000)]
        clock = StepClock()
        tracker, collection = make_tracker(clock)
        feed(tracker, clock, signals)

        expected = 0
        connected = True
        for ok in signals:
            if ok and not connected:
                expected += 1
                connected = True
            elif not ok and connected:
                connected = False

        assert len(collection) == expected


class TestTransitionCallback:
    def test_callback_sees_each_transition(self):
        seen = []
        tracker, _ = make_tracker(on_transition=lambda s, i: seen.append((s, i)))

        tracker.report_success()
        tracker.report_failure()
        tracker.report_failure()
        interval = tracker.report_success()

        assert seen == [
            (ConnectionState.DISCONNECTED, None),
            (ConnectionState.CONNECTED, interval),
        ]

    def test_callback_runs_outside_lock(self):
        tracker_box = {}

        def callback(state, interval):
            # Reading state takes the tracker lock; this would deadlock if
            # the callback ran inside it.
            tracker_box["state"] = tracker_box["tracker"].state

        tracker, _ = make_tracker(on_transition=callback)
        tracker_box["tracker"] = tracker
        tracker.report_failure()
        assert tracker_box["state"] == ConnectionState.DISCONNECTED


class TestConcurrency:
    def test_concurrent_reporters_never_double_count(self):
        tracker, collection = make_tracker(clock=StepClock())
        rounds = 300
        workers = 8
        barrier = threading.Barrier(workers)

        def worker():
            for _ in range(rounds):
                barrier.wait()
                tracker.report_failure()
                barrier.wait()
                tracker.report_success()

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Every round is one failure phase followed by one success phase,
        # the same causal order as a single-threaded F,S,F,S... sequence.
        assert len(collection) == rounds
        assert tracker.transitions == rounds * 2
        assert tracker.is_connected

    def test_each_interval_appended_exactly_once(self):
        tracker, collection = make_tracker(clock=StepClock())
        workers = 16
        barrier = threading.Barrier(workers)
        closed = []
        lock = threading.Lock()

        tracker.report_failure()

        def worker():
            barrier.wait()
            interval = tracker.report_success()
            if interval is not None:
                with lock:
                    closed.append(interval)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(closed) == 1
        assert collection.snapshot() == closed


class TestIntervalCollection:
    def test_wait_for_wakes_on_append(self):
        tracker, collection = make_tracker(clock=StepClock())

        def flap():
            for _ in range(2):
                tracker.report_failure()
                tracker.report_success()

        timer = threading.Timer(0.05, flap)
        timer.start()
        try:
            assert collection.wait_for(2, timeout=5.0) is True
        finally:
            timer.cancel()
        assert len(collection) == 2

    def test_wait_for_times_out(self):
        _, collection = make_tracker()
        assert collection.wait_for(1, timeout=0.01) is False

    def test_snapshot_is_a_copy(self):
        tracker, collection = make_tracker(clock=StepClock())
        tracker.report_failure()
        tracker.report_success()
        snapshot = collection.snapshot()
        snapshot.clear()
        assert len(collection) == 1
