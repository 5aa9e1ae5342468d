#!/usr/bin/env python3
"""
Two-phase greedy linkage of primary and secondary flare records.

Phase A clusters primary (World Bank) records:
- Records are visited in input order
- Each record joins the FIRST existing cluster (creation order) whose
  center is closer than the threshold, and the center moves immediately
- Otherwise the record opens a new cluster

Phase B attaches secondary (VIIRS) records:
- Records are visited in input order
- Each record joins the NEAREST cluster if that distance is below the
  threshold (ties go to the earlier cluster)
- Otherwise it is kept as a dangling record

Cluster shape depends on input order. Nothing is ever reassigned.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from tqdm import tqdm

from ..constants import DEFAULT_THRESHOLD_KM
from ..geo import haversine_km
from ..records import PrimaryRecord, SecondaryRecord
from .cluster import Cluster

logger = logging.getLogger(__name__)


@dataclass
class LinkageResult:
    """Clusters (creation order) and the secondary records left unmatched."""
    clusters: List[Cluster] = field(default_factory=list)
    dangling: List[SecondaryRecord] = field(default_factory=list)

    @property
    def matched_secondary(self) -> int:
        return sum(len(c.secondary_records) for c in self.clusters)


def _check_threshold(threshold_km: float) -> None:
    if not threshold_km > 0:
        raise ValueError(f"threshold_km must be positive, got {threshold_km}")


def find_first_within(clusters: Sequence[Cluster], lat: float, lon: float,
                      threshold_km: float) -> Optional[Cluster]:
    """Return the first non-empty cluster whose center is closer than threshold_km."""
    for cluster in clusters:
        if cluster.is_empty:
            continue
        if haversine_km(lat, lon, cluster.center_lat, cluster.center_lon) < threshold_km:
            return cluster
    return None


def find_nearest(clusters: Sequence[Cluster], lat: float,
                 lon: float) -> Tuple[Optional[Cluster], float]:
    """
    Return the cluster with the closest center and its distance in km.

    Empty clusters are ignored. Returns (None, inf) when no cluster has a
    center or every distance is NaN.
    """
    nearest = None
    best = float('inf')
    for cluster in clusters:
        if cluster.is_empty:
            continue
        dist = haversine_km(lat, lon, cluster.center_lat, cluster.center_lon)
        if dist < best:
            best = dist
            nearest = cluster
    return nearest, best


def cluster_primary(
    records: Sequence[PrimaryRecord],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
    progress: bool = False
) -> List[Cluster]:
    """
    Phase A: first-fit clustering of primary records.

    Args:
        records: Primary records in input order
        threshold_km: Strict distance limit to an existing cluster center
        progress: Show a progress bar

    Returns:
        New clusters in creation order, containing only primary records
    """
    _check_threshold(threshold_km)
    clusters: List[Cluster] = []

    for record in tqdm(records, desc="Clustering primary", disable=not progress):
        target = find_first_within(clusters, record.latitude, record.longitude, threshold_km)
        if target is None:
            clusters.append(Cluster.from_primary(record))
        else:
            target.add_primary(record)

    logger.info(f"Phase A: {len(records)} primary records -> {len(clusters)} clusters")
    return clusters


def attach_secondary(
    clusters: Sequence[Cluster],
    records: Sequence[SecondaryRecord],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
    progress: bool = False
) -> List[SecondaryRecord]:
    """
    Phase B: nearest-fit attachment of secondary records.

    Mutates the given clusters by adding secondary members.

    Args:
        clusters: Clusters produced by cluster_primary
        records: Secondary records in input order
        threshold_km: Strict distance limit to the nearest cluster center
        progress: Show a progress bar

    Returns:
        Dangling records (no cluster within threshold), input order preserved
    """
    _check_threshold(threshold_km)
    dangling: List[SecondaryRecord] = []

    for record in tqdm(records, desc="Attaching secondary", disable=not progress):
        nearest, dist = find_nearest(clusters, record.latitude, record.longitude)
        if nearest is not None and dist < threshold_km:
            nearest.add_secondary(record)
        else:
            dangling.append(record)

    logger.info(f"Phase B: {len(records) - len(dangling)} secondary records matched, "
                f"{len(dangling)} dangling")
    return dangling


def link_records(
    primary: Sequence[PrimaryRecord],
    secondary: Sequence[SecondaryRecord],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
    progress: bool = False
) -> LinkageResult:
    """
    Run both linkage phases.

    Args:
        primary: Primary records (anchor the clusters)
        secondary: Secondary records (attached to existing clusters only)
        threshold_km: Distance threshold for both phases
        progress: Show progress bars

    Returns:
        LinkageResult with clusters and dangling secondary records
    """
    clusters = cluster_primary(primary, threshold_km, progress=progress)
    dangling = attach_secondary(clusters, secondary, threshold_km, progress=progress)
    return LinkageResult(clusters=clusters, dangling=dangling)
