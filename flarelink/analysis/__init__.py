"""
Statistics and regression over linked flaring data.
"""

from .regression import (
    STATUS_DEGENERATE,
    STATUS_INSUFFICIENT,
    STATUS_OK,
    RegressionResult,
    fit_combined,
    fit_line,
)
from .summary import Histogram, SummaryStats, bar_lengths, histogram, summary_stats
