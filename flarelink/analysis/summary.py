#!/usr/bin/env python3
"""
Exploratory statistics over a column of numbers.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from ..constants import HISTOGRAM_BAR_WIDTH, HISTOGRAM_BINS


@dataclass(frozen=True)
class SummaryStats:
    """Count, range, center and spread. All zero for empty input."""
    count: int = 0
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    std: float = 0.0  # population standard deviation

    @property
    def is_empty(self) -> bool:
        return self.count == 0


@dataclass(frozen=True)
class Histogram:
    """Equal-width bins starting at lower."""
    lower: float = 0.0
    width: float = 0.0
    counts: List[int] = field(default_factory=list)

    @property
    def bins(self) -> int:
        return len(self.counts)

    def edges(self) -> List[Tuple[float, float]]:
        """(lower, upper) bounds of every bin."""
        result = []
        for i in range(self.bins):
            lo = self.lower + i * self.width
            result.append((lo, lo + self.width))
        return result


def summary_stats(values: Sequence[float]) -> SummaryStats:
    """
    Compute count, min, max, mean, median and population std.

    The median comes from a sorted copy; the input is not modified.
    """
    arr = np.array(values, dtype=float)
    if arr.size == 0:
        return SummaryStats()

    return SummaryStats(
        count=int(arr.size),
        min=float(arr.min()),
        max=float(arr.max()),
        mean=float(arr.mean()),
        median=float(np.median(arr)),
        std=float(arr.std(ddof=0)),
    )


def histogram(values: Sequence[float], bins: int = HISTOGRAM_BINS) -> Histogram:
    """
    Count values into equal-width bins over the observed range.

    A value equal to the maximum lands in the last bin. When all values
    are equal the range is empty and every value lands in the first bin.

    Args:
        values: Numbers to bin
        bins: Number of bins (at least 1)

    Returns:
        Histogram; no counts for empty input
    """
    if bins < 1:
        raise ValueError(f"bins must be at least 1, got {bins}")

    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return Histogram()

    lo = float(arr.min())
    hi = float(arr.max())
    width = (hi - lo) / bins

    if width == 0:
        index = np.zeros(arr.size, dtype=int)
    else:
        index = np.floor((arr - lo) / width).astype(int)
        index = np.clip(index, 0, bins - 1)

    counts = np.bincount(index, minlength=bins)
    return Histogram(lower=lo, width=width, counts=[int(c) for c in counts])


def bar_lengths(counts: Sequence[int], width: int = HISTOGRAM_BAR_WIDTH) -> List[int]:
    """Scale counts so the largest bin gets a bar of the given width."""
    peak = max(counts, default=0)
    if peak <= 0:
        return [0 for _ in counts]
    return [c * width // peak for c in counts]
