#!/usr/bin/env python3
"""
Plain-text analysis report.

Sections follow the pipeline steps:
1. Data exploration (counts, columns, sample records)
1.1 Summary statistics and histograms of the raw volumes
2. Country filtering
3. Clustering and joining
4. Dangling rows
5. Regression
6. Observations
"""

from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence

from ..analysis.regression import STATUS_DEGENERATE, STATUS_INSUFFICIENT, RegressionResult
from ..analysis.summary import Histogram, SummaryStats, bar_lengths
from ..constants import HISTOGRAM_BAR_WIDTH
from ..records import VIIRS_COLUMNS, WORLD_BANK_COLUMNS

if TYPE_CHECKING:
    from ..pipeline import PipelineResult

RULE = '-' * 49


def format_stats(stats: SummaryStats) -> str:
    if stats.is_empty:
        return "  Count: 0 (no data)"
    return (f"  Count: {stats.count}, Min: {stats.min:.2f}, Max: {stats.max:.2f}, "
            f"Mean: {stats.mean:.2f}, Median: {stats.median:.2f}, StdDev: {stats.std:.2f}")


def format_histogram(hist: Histogram, bar_width: int = HISTOGRAM_BAR_WIDTH) -> List[str]:
    """One line per bin: '[lower - upper]: count | ****'."""
    if not hist.counts:
        return ["No data to display histogram."]

    lines = []
    bars = bar_lengths(hist.counts, bar_width)
    for (lower, upper), count, bar in zip(hist.edges(), hist.counts, bars):
        lines.append(f"[{lower:6.2f} - {upper:6.2f}]: {count:3d} | {'*' * bar}")
    return lines


def format_record(record) -> str:
    fields = ', '.join(f"{k}={v!r}" for k, v in asdict(record).items())
    return f"{type(record).__name__}({fields})"


def format_regression(result: RegressionResult, target_year: str) -> List[str]:
    if result.status == STATUS_INSUFFICIENT:
        return ["Not enough clusters with valid data for regression."]
    if result.status == STATUS_DEGENERATE:
        return [f"Regression is degenerate: VIIRS volume has no variance across {result.n} clusters."]

    r2 = f"{result.r_squared:.6f}" if result.r_squared is not None else "undefined (no variance in y)"
    return [
        f"Regression Model (Predicting WB {target_year} Flaring Volume):",
        f"  Slope: {result.slope:.6f}",
        f"  Intercept: {result.intercept:.6f}",
        f"  R-squared: {r2}",
        f"  Data points: {result.n}",
    ]


def observations(result: RegressionResult, target_year: str) -> List[str]:
    """Short reading of the fit for the closing section."""
    if not result.ok:
        return ["  - No fitted relationship; too little linked data to compare the surveys."]

    lines = [f"  - The regression relates the VIIRS 2015 flaring volume to the World Bank "
             f"{target_year} volume across {result.n} linked sites."]
    if result.slope > 0:
        lines.append("  - Sites with higher VIIRS volume tend to show higher World Bank volume, "
                     "suggesting persistent operating levels.")
    elif result.slope < 0:
        lines.append("  - Sites with higher VIIRS volume tend to show lower World Bank volume, "
                     "suggesting reductions at the larger sites.")
    else:
        lines.append("  - The fitted line is flat; VIIRS volume does not explain the World Bank volume.")

    if result.r_squared is not None:
        lines.append(f"  - The VIIRS volume explains {result.r_squared * 100:.1f}% of the variance; "
                     "clustering and measurement error account for part of the rest.")
    lines.append("  - World Bank data anchors the analysis; dangling VIIRS detections are excluded.")
    return lines


def _samples(records: Sequence, count: int) -> List[str]:
    return [format_record(r) for r in records[:count]]


def build_report(result: 'PipelineResult', bar_width: int = HISTOGRAM_BAR_WIDTH,
                 sample_count: int = 3) -> str:
    """Render the full report for a pipeline run."""
    cfg = result.config
    year = cfg.target_year.strip()
    country = cfg.country or 'all countries'
    out: List[str] = []

    out.append("Step 1: Data Exploration")
    out.append(RULE)
    out.append(f"World Bank file ({cfg.world_bank_path.name}) loaded with {result.primary_total} records.")
    out.append(f"World Bank Columns: {', '.join(WORLD_BANK_COLUMNS)}")
    out.append("Sample World Bank records:")
    out.extend(_samples(result.primary_samples, sample_count))
    out.append("")
    out.append(f"VIIRS file ({cfg.viirs_path.name}) loaded with {result.secondary_total} records.")
    out.append(f"VIIRS Columns: {', '.join(VIIRS_COLUMNS)}")
    out.append("Sample VIIRS records:")
    out.extend(_samples(result.secondary_samples, sample_count))

    out.append("")
    out.append("Step 1.1: Summary Statistics and Visualisations")
    out.append(RULE)
    out.append("World Bank Flaring Volume Summary:")
    out.append(format_stats(result.primary_stats))
    out.append("")
    out.append("World Bank Flaring Volume Histogram:")
    out.extend(format_histogram(result.primary_histogram, bar_width))
    out.append("")
    out.append("VIIRS Flaring Volume Summary:")
    out.append(format_stats(result.secondary_stats))
    out.append("")
    out.append("VIIRS Flaring Volume Histogram:")
    out.extend(format_histogram(result.secondary_histogram, bar_width))

    out.append("")
    out.append(f"Step 2: Filtering for {country}")
    out.append(f"Filtered World Bank records: {result.primary_filtered} records from {country}.")
    out.append(f"Filtered VIIRS records: {result.secondary_filtered} records from {country}.")

    out.append("")
    out.append(f"Step 3: Clustering and Joining Data ({cfg.threshold_km:g} km threshold)")
    out.append(f"Number of clusters formed: {result.cluster_count}")
    out.append(f"Number of dangling VIIRS records (no matching WB cluster): {result.dangling_count}")

    out.append("")
    out.append("Step 4: Exploring and Handling Dangling Rows")
    out.append(f"Number of clusters with {year} World Bank and VIIRS data: {len(result.combined)}")
    out.append(f"Strategy for dangling rows: World Bank is definitive. Any VIIRS record not within "
               f"{cfg.threshold_km:g} km of a WB cluster is flagged as dangling and omitted from "
               f"further regression analysis.")
    for label, path in result.written.items():
        out.append(f"{label} saved as {Path(path).name}")

    out.append("")
    out.append("Step 5: Regression Model")
    out.extend(format_regression(result.regression, year))

    out.append("")
    out.append("Step 6: Observations")
    out.append("Observations:")
    out.extend(observations(result.regression, year))

    return '\n'.join(out) + '\n'


def write_report(text: str, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)
    return path
