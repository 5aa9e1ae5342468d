#!/usr/bin/env python3
"""
Pipeline configuration.

Settings come from a JSON file (see link_config.json) laid over
DEFAULT_CONFIG. Command line options override individual values.
"""

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    COMBINED_FILE,
    DANGLING_FILE,
    DEFAULT_COUNTRY,
    DEFAULT_TARGET_YEAR,
    DEFAULT_THRESHOLD_KM,
    GEOJSON_FILE,
    HISTOGRAM_BAR_WIDTH,
    HISTOGRAM_BINS,
    REPORT_FILE,
    SAMPLE_RECORD_COUNT,
    VIIRS_FILE,
    VOLUME_POLICIES,
    VOLUME_POLICY_ZERO,
    WORLD_BANK_FILE,
)

REQUIRED_SECTIONS = ['sources', 'matching', 'output']

DEFAULT_CONFIG: Dict[str, Any] = {
    'sources': {
        'world_bank': WORLD_BANK_FILE,
        'viirs': VIIRS_FILE,
        'invalid_volume': VOLUME_POLICY_ZERO,
    },
    'filter': {
        'country': DEFAULT_COUNTRY,
    },
    'matching': {
        'threshold_km': DEFAULT_THRESHOLD_KM,
    },
    'aggregation': {
        'target_year': DEFAULT_TARGET_YEAR,
    },
    'report': {
        'histogram_bins': HISTOGRAM_BINS,
        'bar_width': HISTOGRAM_BAR_WIDTH,
        'sample_count': SAMPLE_RECORD_COUNT,
    },
    'output': {
        'dir': '.',
        'combined': COMBINED_FILE,
        'dangling': DANGLING_FILE,
        'geojson': GEOJSON_FILE,
        'report': REPORT_FILE,
    },
}


@dataclass
class PipelineConfig:
    """Resolved settings for one pipeline run."""
    world_bank_path: Path
    viirs_path: Path
    invalid_volume: str = VOLUME_POLICY_ZERO
    country: Optional[str] = DEFAULT_COUNTRY
    threshold_km: float = DEFAULT_THRESHOLD_KM
    target_year: str = DEFAULT_TARGET_YEAR
    histogram_bins: int = HISTOGRAM_BINS
    bar_width: int = HISTOGRAM_BAR_WIDTH
    sample_count: int = SAMPLE_RECORD_COUNT
    output_dir: Path = Path('.')
    combined_file: str = COMBINED_FILE
    dangling_file: str = DANGLING_FILE
    geojson_file: Optional[str] = GEOJSON_FILE
    report_file: str = REPORT_FILE
    progress: bool = False

    def validate(self) -> None:
        """Raise ValueError for settings the pipeline cannot run with."""
        if not self.threshold_km > 0:
            raise ValueError(f"matching.threshold_km must be positive, got {self.threshold_km}")
        if self.invalid_volume not in VOLUME_POLICIES:
            raise ValueError(f"sources.invalid_volume must be one of {VOLUME_POLICIES}, "
                             f"got {self.invalid_volume!r}")
        if self.histogram_bins < 1:
            raise ValueError(f"report.histogram_bins must be at least 1, got {self.histogram_bins}")
        if self.bar_width < 1:
            raise ValueError(f"report.bar_width must be at least 1, got {self.bar_width}")
        if self.sample_count < 0:
            raise ValueError(f"report.sample_count must not be negative, got {self.sample_count}")
        if not str(self.target_year).strip():
            raise ValueError("aggregation.target_year must not be empty")

    def output_path(self, name: str) -> Path:
        return self.output_dir / name


def merge_dicts(base: Dict, override: Dict) -> Dict:
    """Recursively lay override over a copy of base."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def config_from_dict(raw: Dict, base_dir: Optional[Path] = None) -> PipelineConfig:
    """
    Build a PipelineConfig from a (possibly partial) config dict.

    Relative paths are resolved against base_dir when given.
    """
    data = merge_dicts(DEFAULT_CONFIG, raw)

    def resolve(value: str) -> Path:
        path = Path(value)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return path

    sources = data['sources']
    output = data['output']
    report = data['report']

    try:
        config = PipelineConfig(
            world_bank_path=resolve(sources['world_bank']),
            viirs_path=resolve(sources['viirs']),
            invalid_volume=sources['invalid_volume'],
            country=data['filter'].get('country'),
            threshold_km=float(data['matching']['threshold_km']),
            target_year=str(data['aggregation']['target_year']),
            histogram_bins=int(report['histogram_bins']),
            bar_width=int(report['bar_width']),
            sample_count=int(report['sample_count']),
            output_dir=resolve(output['dir']),
            combined_file=output['combined'],
            dangling_file=output['dangling'],
            geojson_file=output.get('geojson'),
            report_file=output['report'],
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid config value: {e}") from e

    config.validate()
    return config


def load_config(config_path: Path) -> PipelineConfig:
    """Load and validate a JSON config file."""
    config_path = Path(config_path)
    with open(config_path) as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Config must be a JSON object: {config_path}")

    # Validate required fields
    for section in REQUIRED_SECTIONS:
        if section not in raw:
            raise ValueError(f"Missing required config field: {section}")

    return config_from_dict(raw, base_dir=config_path.parent)
