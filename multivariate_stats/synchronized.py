"""Thread-safe wrapper around :class:`MultivariateSummaryStatistics`.

Every public operation of the owned accumulator, mutators and accessors
alike, runs inside one reentrant critical section per instance. Compound
reads such as :meth:`get_covariance` (which reads ``n``, the sums and the
cross-products together) therefore always observe a state produced by some
sequence of completed ``add_value`` calls.

The lock is applied at a single seam, :meth:`__getattr__`, so accessors are
never wrapped one by one.

Example:
    Share one accumulator between producer threads::

        from concurrent.futures import ThreadPoolExecutor

        stats = SynchronizedMultivariateSummaryStatistics(3)
        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(stats.add_value, vectors))

        stats.get_n() == len(vectors)

    Run several operations as one atomic step::

        with stats.locked() as inner:
            mean = inner.get_mean()
            inner.clear()
"""

from __future__ import annotations

from contextlib import contextmanager
import functools
import logging
import threading
from typing import Any, Callable, Iterator, TypeVar

from .accumulator import MultivariateSummaryStatistics
from .summary import MultivariateSummary, SummarySource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SynchronizedMultivariateSummaryStatistics(SummarySource):
    """Thread-safe :class:`MultivariateSummaryStatistics`.

    Accepts the same arguments as :class:`MultivariateSummaryStatistics` and
    exposes the same public methods; each call holds this instance's
    :class:`threading.RLock` for its whole duration and releases it on every
    exit path, including exceptions.

    Args:
        dimension: Number of components in every vector.
        bias_corrected: Use the ``n - 1`` denominator if True.
        **kwargs: Policies forwarded to :class:`MultivariateSummaryStatistics`.
    """

    def __init__(self, dimension: int, bias_corrected: bool = True, **kwargs: Any) -> None:
        self._lock = threading.RLock()
        self._inner = MultivariateSummaryStatistics(dimension, bias_corrected, **kwargs)

    @classmethod
    def wrap(
        cls, stats: MultivariateSummaryStatistics
    ) -> "SynchronizedMultivariateSummaryStatistics":
        """Take ownership of an existing accumulator.

        The caller must stop using ``stats`` directly afterwards; all access
        has to go through the returned wrapper.
        """
        if not isinstance(stats, MultivariateSummaryStatistics):
            raise TypeError(
                f"expected MultivariateSummaryStatistics, got {type(stats).__name__}"
            )
        result = cls.__new__(cls)
        result._lock = threading.RLock()
        result._inner = stats
        logger.debug("Wrapped %r for synchronized access", stats)
        return result

    def _guarded(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with self._lock:
            return func(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not defined on the wrapper itself
        if name.startswith("_"):
            raise AttributeError(name)
        with self._lock:
            attr = getattr(self._inner, name)
        if not callable(attr):
            return attr

        @functools.wraps(attr)
        def guarded(*args: Any, **kwargs: Any) -> Any:
            return self._guarded(attr, *args, **kwargs)

        return guarded

    def __setattr__(self, name: str, value: Any) -> None:
        # Writes would land on the wrapper and bypass the owned accumulator
        if not name.startswith("_"):
            raise AttributeError(
                f"{type(self).__name__} does not support setting attribute {name!r}"
            )
        object.__setattr__(self, name, value)

    @contextmanager
    def locked(self) -> Iterator[MultivariateSummaryStatistics]:
        """Hold the lock and yield the owned accumulator.

        Use this to run several operations as one atomic step. The yielded
        object must not escape the ``with`` block.
        """
        with self._lock:
            yield self._inner

    def summary(self) -> MultivariateSummary:
        return self._guarded(self._inner.summary)

    def copy(self) -> "SynchronizedMultivariateSummaryStatistics":
        """Return a new synchronized accumulator with an independent copy of the state."""
        return type(self).wrap(self._guarded(self._inner.copy))

    def __str__(self) -> str:
        return self._guarded(str, self._inner)

    def __repr__(self) -> str:
        return f"Synchronized{self._guarded(repr, self._inner)}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SummarySource):
            return NotImplemented
        # Never hold both locks at once, so crossed comparisons cannot deadlock
        mine = self.summary()
        return mine == other.summary()

    def __hash__(self) -> int:
        """Hash of the current snapshot.

        The value changes after ``add_value``, ``add_values`` or ``clear``, so an
        instance must not be kept in a set or used as a dict key across mutations.
        """
        return hash(self.summary())
