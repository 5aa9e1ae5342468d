#!/usr/bin/env python3
"""
Write the combined dataset and the dangling VIIRS records as CSV.

Column order and 6-decimal formatting match earlier runs so outputs can
be diffed byte for byte.
"""

import csv
import logging
from pathlib import Path
from typing import Iterable, List

from ..constants import COORD_DECIMALS, DEFAULT_TARGET_YEAR
from ..merge.aggregate import CombinedRow
from ..records import SecondaryRecord

logger = logging.getLogger(__name__)

DANGLING_HEADER = [
    'CntryName', 'CntryIso', 'CatalogID', 'IDNumber', 'Latitude', 'Longitude',
    'FlrVolume', 'AvgTemp', 'Ellip', 'DtcFreq', 'ClrObs', 'FlrType',
]


def combined_header(target_year: str = DEFAULT_TARGET_YEAR) -> List[str]:
    return ['ClusterID', 'AvgLat', 'AvgLon', f'WBVolume{target_year.strip()}', 'VIIRSVolume']


def combined_row_values(row: CombinedRow, decimals: int = COORD_DECIMALS) -> List[str]:
    return [
        str(row.cluster_id),
        f"{row.center_lat:.{decimals}f}",
        f"{row.center_lon:.{decimals}f}",
        f"{row.primary_volume:.{decimals}f}",
        f"{row.secondary_volume:.{decimals}f}",
    ]


def write_combined(rows: Iterable[CombinedRow], path: Path,
                   target_year: str = DEFAULT_TARGET_YEAR) -> int:
    """
    Write combined rows.

    Returns:
        Number of data rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f, lineterminator='\n')
        writer.writerow(combined_header(target_year))
        for row in rows:
            writer.writerow(combined_row_values(row))
            count += 1

    logger.info(f"Wrote {count} combined rows to {path}")
    return count


def write_dangling(records: Iterable[SecondaryRecord], path: Path) -> int:
    """
    Write dangling secondary records with all original attributes.

    Returns:
        Number of data rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f, lineterminator='\n')
        writer.writerow(DANGLING_HEADER)
        for record in records:
            writer.writerow(record.as_row(COORD_DECIMALS))
            count += 1

    logger.info(f"Wrote {count} dangling records to {path}")
    return count
