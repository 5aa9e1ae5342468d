#!/usr/bin/env python3
"""
Main pipeline orchestrator.

Runs the full flare linkage analysis:
1. Read - Parse the World Bank and VIIRS CSV exports
2. Explore - Summary statistics and histograms of both volume columns
3. Filter - Restrict both sources to one country
4. Link - Cluster World Bank records, attach VIIRS records
5. Aggregate - One combined row per cluster with both inputs
6. Regress - Explain the target-year World Bank volume by VIIRS volume
7. Export - Combined CSV, dangling CSV, GeoJSON map, text report

Usage:
    python -m flarelink.pipeline --config link_config.json
    flarelink --world-bank wb.csv --viirs viirs.csv --country Algeria --output-dir out/
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .analysis.regression import RegressionResult, fit_combined
from .analysis.summary import Histogram, SummaryStats, histogram, summary_stats
from .config import DEFAULT_CONFIG, PipelineConfig, config_from_dict, load_config
from .constants import VOLUME_POLICIES
from .export.export_csv import write_combined, write_dangling
from .export.export_geojson import write_geojson
from .export.report import build_report, write_report
from .ingest import ViirsReader, WorldBankReader, filter_by_country
from .merge.aggregate import CombinedRow, aggregate_clusters
from .merge.linkage import LinkageResult, link_records
from .records import PrimaryRecord, SecondaryRecord

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything the reporting layer needs from one run."""
    config: PipelineConfig
    primary_total: int
    secondary_total: int
    primary_filtered: int
    secondary_filtered: int
    primary_stats: SummaryStats
    secondary_stats: SummaryStats
    primary_histogram: Histogram
    secondary_histogram: Histogram
    linkage: LinkageResult
    combined: List[CombinedRow]
    regression: RegressionResult
    primary_samples: List[PrimaryRecord] = field(default_factory=list)
    secondary_samples: List[SecondaryRecord] = field(default_factory=list)
    written: Dict[str, Path] = field(default_factory=dict)

    @property
    def cluster_count(self) -> int:
        return len(self.linkage.clusters)

    @property
    def dangling(self) -> List[SecondaryRecord]:
        return self.linkage.dangling

    @property
    def dangling_count(self) -> int:
        return len(self.linkage.dangling)


def load_sources(config: PipelineConfig) -> Tuple[List[PrimaryRecord], List[SecondaryRecord]]:
    """Read both CSV exports with the configured volume policy."""
    wb_reader = WorldBankReader(config.world_bank_path, invalid_volume=config.invalid_volume)
    viirs_reader = ViirsReader(config.viirs_path, invalid_volume=config.invalid_volume)
    return wb_reader.read(), viirs_reader.read()


def analyze(
    primary: Sequence[PrimaryRecord],
    secondary: Sequence[SecondaryRecord],
    config: PipelineConfig
) -> PipelineResult:
    """
    Run exploration, filtering, linkage, aggregation and regression in memory.

    Args:
        primary: All parsed World Bank records
        secondary: All parsed VIIRS records
        config: Run settings

    Returns:
        PipelineResult (nothing written yet)
    """
    primary_volumes = [r.flaring_volume for r in primary]
    secondary_volumes = [r.flare_volume for r in secondary]

    wb_country = filter_by_country(primary, config.country, attr='country')
    viirs_country = filter_by_country(secondary, config.country, attr='country_name')
    if config.country:
        logger.info(f"Filtered to {config.country}: {len(wb_country)} World Bank, "
                    f"{len(viirs_country)} VIIRS records")

    linkage = link_records(wb_country, viirs_country, config.threshold_km, progress=config.progress)
    combined = aggregate_clusters(linkage.clusters, config.target_year)
    regression = fit_combined(combined)

    return PipelineResult(
        config=config,
        primary_total=len(primary),
        secondary_total=len(secondary),
        primary_filtered=len(wb_country),
        secondary_filtered=len(viirs_country),
        primary_stats=summary_stats(primary_volumes),
        secondary_stats=summary_stats(secondary_volumes),
        primary_histogram=histogram(primary_volumes, config.histogram_bins),
        secondary_histogram=histogram(secondary_volumes, config.histogram_bins),
        linkage=linkage,
        combined=combined,
        regression=regression,
        primary_samples=list(primary[:config.sample_count]),
        secondary_samples=list(secondary[:config.sample_count]),
    )


def write_outputs(result: PipelineResult) -> Dict[str, Path]:
    """Write the combined, dangling and GeoJSON outputs. Returns label -> path."""
    config = result.config
    written: Dict[str, Path] = {}

    path = config.output_path(config.combined_file)
    write_combined(result.combined, path, config.target_year)
    written['Combined dataset'] = path

    path = config.output_path(config.dangling_file)
    write_dangling(result.dangling, path)
    written['Dangling VIIRS records'] = path

    if config.geojson_file:
        path = config.output_path(config.geojson_file)
        write_geojson(result.combined, result.dangling, path, metadata={
            'threshold_km': config.threshold_km,
            'target_year': config.target_year,
            'country': config.country,
        })
        written['Cluster map'] = path

    result.written.update(written)
    return written


def run_pipeline(config: PipelineConfig, write: bool = True) -> Tuple[PipelineResult, str]:
    """
    Run the whole pipeline.

    Args:
        config: Run settings
        write: Write output files and the report

    Returns:
        Tuple of (result, report text)
    """
    primary, secondary = load_sources(config)
    result = analyze(primary, secondary, config)

    if write:
        write_outputs(result)

    report = build_report(result, bar_width=config.bar_width, sample_count=config.sample_count)

    if write:
        path = write_report(report, config.output_path(config.report_file))
        logger.info(f"Report saved to {path}")

    return result, report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Link World Bank and VIIRS flaring records and regress their volumes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--config', type=Path, help='JSON config file (see link_config.json)')
    parser.add_argument('--world-bank', type=Path, help='World Bank flare volume CSV')
    parser.add_argument('--viirs', type=Path, help='VIIRS flare survey CSV')

    country = parser.add_mutually_exclusive_group()
    country.add_argument('--country', help='Country to analyze (default: Algeria)')
    country.add_argument('--all-countries', action='store_true',
                         help='Do not filter by country')

    parser.add_argument('--threshold-km', type=float,
                        help='Linkage distance threshold in km (default: 3.0)')
    parser.add_argument('--year', help='World Bank year to average per cluster (default: 2019)')
    parser.add_argument('--output-dir', type=Path, help='Directory for output files')
    parser.add_argument('--invalid-volume', choices=VOLUME_POLICIES,
                        help="Unparsable volumes: 'zero' keeps the row with 0.0, 'skip' drops it")
    parser.add_argument('--no-geojson', action='store_true', help='Skip the GeoJSON map output')
    parser.add_argument('--no-write', action='store_true',
                        help='Print the report without writing any files')
    parser.add_argument('--progress', action='store_true', help='Show progress bars')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging')
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    """Resolve the config file (or defaults) and apply command line overrides."""
    if args.config:
        config = load_config(args.config)
    else:
        config = config_from_dict(DEFAULT_CONFIG)

    if args.world_bank:
        config.world_bank_path = args.world_bank
    if args.viirs:
        config.viirs_path = args.viirs
    if args.country:
        config.country = args.country
    if args.all_countries:
        config.country = None
    if args.threshold_km is not None:
        config.threshold_km = args.threshold_km
    if args.year:
        config.target_year = args.year
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.invalid_volume:
        config.invalid_volume = args.invalid_volume
    if args.no_geojson:
        config.geojson_file = None
    config.progress = args.progress

    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = config_from_args(args)
        _, report = run_pipeline(config, write=not args.no_write)
    except (OSError, ValueError) as e:
        logger.error(f"Pipeline failed: {e}", exc_info=args.verbose)
        return 1

    print(report)
    return 0


if __name__ == '__main__':
    sys.exit(main())
