#!/usr/bin/env python3
"""
Reduce clusters to one combined row each for regression.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..constants import DEFAULT_TARGET_YEAR
from .cluster import Cluster

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CombinedRow:
    """Aggregated values of one retained cluster."""
    cluster_id: int
    center_lat: float
    center_lon: float
    primary_volume: float  # mean target-year World Bank volume
    secondary_volume: float  # mean VIIRS volume


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def aggregate_cluster(cluster: Cluster, cluster_id: int,
                      target_year: str = DEFAULT_TARGET_YEAR) -> Optional[CombinedRow]:
    """
    Average one cluster.

    Returns None when the cluster has no primary record for the target
    year or no secondary records at all.
    """
    primary_avg = _mean([r.flaring_volume for r in cluster.primary_records
                         if r.matches_year(target_year)])
    if primary_avg is None:
        return None

    secondary_avg = _mean([r.flare_volume for r in cluster.secondary_records])
    if secondary_avg is None:
        return None

    return CombinedRow(
        cluster_id=cluster_id,
        center_lat=cluster.center_lat,
        center_lon=cluster.center_lon,
        primary_volume=primary_avg,
        secondary_volume=secondary_avg,
    )


def aggregate_clusters(clusters: Iterable[Cluster],
                       target_year: str = DEFAULT_TARGET_YEAR) -> List[CombinedRow]:
    """
    Build combined rows for every cluster with both inputs.

    Cluster IDs start at 1 and count retained clusters only.
    Clusters are left untouched.
    """
    rows: List[CombinedRow] = []
    no_year = 0
    no_secondary = 0

    for cluster in clusters:
        row = aggregate_cluster(cluster, len(rows) + 1, target_year)
        if row is not None:
            rows.append(row)
        elif not any(r.matches_year(target_year) for r in cluster.primary_records):
            no_year += 1
        else:
            no_secondary += 1

    logger.info(f"Aggregated {len(rows)} clusters "
                f"(skipped {no_year} without {target_year} data, {no_secondary} without VIIRS data)")
    return rows
