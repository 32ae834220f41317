"""Tests for SynchronizedMultivariateSummaryStatistics."""

from concurrent.futures import ThreadPoolExecutor
import threading
import time

import numpy as np
import pytest

from multivariate_stats import (
    DimensionMismatchError,
    InvalidStateError,
    MultivariateSummaryStatistics,
    Sum,
    SynchronizedMultivariateSummaryStatistics,
)
from multivariate_stats._warnings import DataQualityWarning


class _OverlapTracker:
    """Counts how many threads are inside a critical region at once."""

    def __init__(self):
        self.guard = threading.Lock()
        self.active = 0
        self.peak = 0


class _TrackedSum(Sum):
    """Sum whose increment is slow and reports overlapping callers."""

    def __init__(self, tracker):
        super().__init__()
        self.tracker = tracker

    def increment(self, value):
        with self.tracker.guard:
            self.tracker.active += 1
            self.tracker.peak = max(self.tracker.peak, self.tracker.active)
        time.sleep(0.001)
        super().increment(value)
        with self.tracker.guard:
            self.tracker.active -= 1


def _run_threads(target, count, *args):
    barrier = threading.Barrier(count)

    def run(i):
        barrier.wait()
        target(i, *args)

    threads = [threading.Thread(target=run, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    assert not any(thread.is_alive() for thread in threads)


class TestConcurrentIngestion:
    """Many producers sharing one accumulator."""

    def test_thread_per_vector(self, synchronized_stats):
        """n equals the thread count and the moments match a sequential run."""
        vectors = [[i + 1.0, 2.0 * (i + 1), 3.0 * (i + 1)] for i in range(64)]

        _run_threads(lambda i: synchronized_stats.add_value(vectors[i]), len(vectors))

        reference = MultivariateSummaryStatistics(3)
        for vector in vectors:
            reference.add_value(vector)

        assert synchronized_stats.get_n() == len(vectors)
        np.testing.assert_array_equal(synchronized_stats.get_sum(), reference.get_sum())
        np.testing.assert_array_equal(synchronized_stats.get_min(), reference.get_min())
        np.testing.assert_array_equal(synchronized_stats.get_max(), reference.get_max())
        np.testing.assert_allclose(synchronized_stats.get_mean(), reference.get_mean())
        np.testing.assert_allclose(
            synchronized_stats.get_covariance(), reference.get_covariance()
        )

    def test_executor_map(self, synchronized_stats, random_vectors):
        """Works with a thread pool as a drop-in sink."""
        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(synchronized_stats.add_value, random_vectors))
        assert synchronized_stats.get_n() == len(random_vectors)
        np.testing.assert_allclose(synchronized_stats.get_mean(), random_vectors.mean(axis=0))

    def test_add_value_calls_never_overlap(self):
        """Only one thread is ever inside the accumulator."""
        tracker = _OverlapTracker()
        stats = SynchronizedMultivariateSummaryStatistics(2)
        stats.set_sum_impl([_TrackedSum(tracker), _TrackedSum(tracker)])

        _run_threads(lambda i: stats.add_value([1.0, 1.0]), 16)

        assert stats.get_n() == 16
        assert tracker.peak == 1

    def test_readers_see_complete_updates(self):
        """Compound reads never observe n out of step with the sums."""
        stats = SynchronizedMultivariateSummaryStatistics(2)
        inconsistencies = []
        done = threading.Event()

        def read():
            while not done.is_set():
                summary = stats.summary()
                if summary.sum[0] != summary.n or summary.sum[1] != summary.n:
                    inconsistencies.append(summary.n)
                if summary.n > 1 and not np.all(summary.covariance == 0.0):
                    inconsistencies.append(summary.n)

        reader = threading.Thread(target=read)
        reader.start()
        try:
            _run_threads(lambda i: stats.add_values([[1.0, 1.0]] * 50), 8)
        finally:
            done.set()
            reader.join(timeout=30)

        assert stats.get_n() == 400
        assert inconsistencies == []


class TestLocking:
    """Reentrancy, exclusion and release on failure."""

    def test_locked_block_is_reentrant(self, synchronized_stats):
        """Guarded calls inside locked() from the same thread do not deadlock."""
        with synchronized_stats.locked() as inner:
            inner.add_value([1.0, 2.0, 3.0])
            assert synchronized_stats.get_n() == 1
            np.testing.assert_array_equal(synchronized_stats.get_mean(), [1.0, 2.0, 3.0])

    def test_locked_block_excludes_other_threads(self, synchronized_stats):
        """Another thread blocks until the locked() block exits."""
        worker = threading.Thread(target=synchronized_stats.add_value, args=([4.0, 5.0, 6.0],))
        with synchronized_stats.locked() as inner:
            worker.start()
            worker.join(timeout=0.2)
            assert worker.is_alive()
            assert inner.get_n() == 0
        worker.join(timeout=30)
        assert not worker.is_alive()
        assert synchronized_stats.get_n() == 1

    def test_lock_released_after_error(self, synchronized_stats):
        """A failed call releases the lock for other threads."""
        with pytest.raises(DimensionMismatchError):
            synchronized_stats.add_value([1.0])

        worker = threading.Thread(target=synchronized_stats.add_value, args=([1.0, 1.0, 1.0],))
        worker.start()
        worker.join(timeout=30)
        assert not worker.is_alive()
        assert synchronized_stats.get_n() == 1

    def test_crossed_equality_does_not_deadlock(self):
        """a == b and b == a in parallel never hold both locks."""
        first = SynchronizedMultivariateSummaryStatistics(2)
        second = SynchronizedMultivariateSummaryStatistics(2)

        def compare(i):
            for _ in range(200):
                if i % 2:
                    assert first == second
                else:
                    assert second == first

        _run_threads(compare, 4)


class TestDelegation:
    """The wrapper exposes the full accumulator API."""

    def test_accessors_and_properties(self, synchronized_stats):
        """Methods and properties are forwarded."""
        assert synchronized_stats.dimension == 3
        assert synchronized_stats.get_dimension() == 3
        assert synchronized_stats.bias_corrected is True
        assert synchronized_stats.is_bias_corrected() is True
        assert len(synchronized_stats.get_sum_impl()) == 3

    def test_forwards_errors(self, synchronized_stats):
        """Typed errors propagate unchanged."""
        synchronized_stats.add_value([1.0, 2.0, 3.0])
        with pytest.raises(InvalidStateError):
            synchronized_stats.set_sum_impl([Sum(), Sum(), Sum()])

    def test_forwards_policies(self):
        """Keyword policies reach the owned accumulator."""
        stats = SynchronizedMultivariateSummaryStatistics(2, False, undefined="raise")
        with pytest.raises(InvalidStateError):
            stats.get_mean()

    def test_private_attributes_not_forwarded(self, synchronized_stats):
        """Internal state of the owned accumulator is not reachable."""
        with pytest.raises(AttributeError):
            synchronized_stats._n

    def test_public_attributes_cannot_be_set(self):
        """Writes are rejected instead of shadowing the owned accumulator."""
        stats = SynchronizedMultivariateSummaryStatistics(2, log_domain="nan")
        assert stats.log_domain == "nan"
        with pytest.raises(AttributeError):
            stats.log_domain = "raise"
        with pytest.raises(AttributeError):
            stats.get_mean = None
        assert stats.log_domain == "nan"
        with pytest.warns(DataQualityWarning):
            stats.add_value([0.0, 1.0])

    def test_unknown_attribute(self, synchronized_stats):
        """Missing names raise AttributeError."""
        with pytest.raises(AttributeError):
            synchronized_stats.get_kurtosis

    def test_matches_plain_accumulator(self, example_vectors):
        """Equality, hash and text agree with an unsynchronized accumulator."""
        plain = MultivariateSummaryStatistics(2)
        synchronized = SynchronizedMultivariateSummaryStatistics(2)
        for vector in example_vectors:
            plain.add_value(vector)
            synchronized.add_value(vector)

        assert synchronized == plain
        assert plain == synchronized
        assert hash(synchronized) == hash(plain)
        assert str(synchronized) == str(plain)
        assert repr(synchronized).startswith("SynchronizedMultivariateSummaryStatistics(")

    def test_copy_is_synchronized_and_independent(self, example_stats):
        """copy returns a new wrapper around an independent accumulator."""
        synchronized = SynchronizedMultivariateSummaryStatistics.wrap(example_stats)
        duplicate = synchronized.copy()
        assert isinstance(duplicate, SynchronizedMultivariateSummaryStatistics)
        assert duplicate == synchronized

        duplicate.clear()
        assert duplicate.get_n() == 0
        assert synchronized.get_n() == 3

    def test_wrap_rejects_other_types(self):
        """Only plain accumulators can be adopted."""
        with pytest.raises(TypeError):
            SynchronizedMultivariateSummaryStatistics.wrap(object())

    def test_clear(self, example_stats):
        """clear runs under the lock and resets the count."""
        synchronized = SynchronizedMultivariateSummaryStatistics.wrap(example_stats)
        synchronized.clear()
        assert synchronized.get_n() == 0
        assert synchronized == MultivariateSummaryStatistics(2)
