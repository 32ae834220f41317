"""Immutable snapshot of every statistic an accumulator exposes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import math
from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd

# Per-dimension vectors, in report order
VECTOR_FIELDS: Tuple[str, ...] = (
    "min",
    "max",
    "mean",
    "geometric_mean",
    "sum",
    "sum_sq",
    "sum_log",
    "standard_deviation",
)


def _freeze(values: np.ndarray) -> np.ndarray:
    frozen = np.array(values, dtype=np.float64, copy=True)
    frozen.setflags(write=False)
    return frozen


def _hash_key(values: np.ndarray) -> Tuple[Any, ...]:
    return tuple(None if math.isnan(v) else v for v in values.ravel().tolist())


class SummarySource(ABC):
    """Anything that can produce a :class:`MultivariateSummary` snapshot."""

    @abstractmethod
    def summary(self) -> "MultivariateSummary":
        """Return a consistent snapshot of the current statistics."""


@dataclass(frozen=True, eq=False)
class MultivariateSummary:
    """Consistent view of an accumulator taken at a single point in time.

    All arrays are read-only copies; later ingestion never changes a
    snapshot. Two snapshots are equal when every field matches, with NaN
    treated as equal to NaN.
    """

    n: int
    dimension: int
    bias_corrected: bool
    sum: np.ndarray
    sum_sq: np.ndarray
    sum_log: np.ndarray
    mean: np.ndarray
    min: np.ndarray
    max: np.ndarray
    geometric_mean: np.ndarray
    standard_deviation: np.ndarray
    covariance: np.ndarray

    def __post_init__(self) -> None:
        for name in VECTOR_FIELDS + ("covariance",):
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultivariateSummary):
            return NotImplemented
        if (self.n, self.dimension, self.bias_corrected) != (
            other.n,
            other.dimension,
            other.bias_corrected,
        ):
            return False
        return all(
            np.array_equal(getattr(self, name), getattr(other, name), equal_nan=True)
            for name in VECTOR_FIELDS + ("covariance",)
        )

    def __hash__(self) -> int:
        return hash(
            (self.n, self.dimension, self.bias_corrected)
            + tuple(_hash_key(getattr(self, name)) for name in VECTOR_FIELDS)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the snapshot to plain Python types.

        Returns:
            Dictionary with scalars, per-dimension lists and the covariance
            as a list of rows.
        """
        data: Dict[str, Any] = {
            "n": self.n,
            "dimension": self.dimension,
            "bias_corrected": self.bias_corrected,
        }
        for name in VECTOR_FIELDS:
            data[name] = getattr(self, name).tolist()
        data["covariance"] = self.covariance.tolist()
        return data

    def to_dataframe(self) -> pd.DataFrame:
        """Convert per-dimension statistics to a pandas DataFrame.

        Returns:
            DataFrame indexed by dimension with one column per statistic.
        """
        df = pd.DataFrame({name: getattr(self, name) for name in VECTOR_FIELDS})
        df.index.name = "dimension"
        df.insert(0, "n", self.n)
        return df

    def covariance_frame(self) -> pd.DataFrame:
        """Return the covariance matrix labelled by dimension."""
        labels = pd.RangeIndex(self.dimension, name="dimension")
        return pd.DataFrame(self.covariance, index=labels, columns=labels)
