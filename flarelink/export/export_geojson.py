#!/usr/bin/env python3
"""
Export linked clusters and dangling detections as a GeoJSON map layer.

Each combined row becomes a Point at its cluster center; each dangling
VIIRS record becomes a Point at its own position. Properties are kept
compact for map styling:
- kind: 'cluster' or 'dangling'
- cid: cluster id (clusters only)
- wb / viirs: volumes
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Optional

import geojson
from shapely.geometry import Point, mapping

from ..merge.aggregate import CombinedRow
from ..records import SecondaryRecord

logger = logging.getLogger(__name__)


def cluster_feature(row: CombinedRow) -> geojson.Feature:
    """Point feature for a combined row."""
    return geojson.Feature(
        geometry=mapping(Point(row.center_lon, row.center_lat)),
        properties={
            'kind': 'cluster',
            'cid': row.cluster_id,
            'wb': row.primary_volume,
            'viirs': row.secondary_volume,
        }
    )


def dangling_feature(record: SecondaryRecord) -> geojson.Feature:
    """Point feature for an unmatched VIIRS detection."""
    return geojson.Feature(
        geometry=mapping(Point(record.longitude, record.latitude)),
        properties={
            'kind': 'dangling',
            'catalog_id': record.catalog_id,
            'iso': record.country_iso,
            'viirs': record.flare_volume,
        }
    )


def build_feature_collection(
    rows: Iterable[CombinedRow],
    dangling: Iterable[SecondaryRecord],
    metadata: Optional[Dict] = None
) -> geojson.FeatureCollection:
    """Assemble clusters and dangling records into one collection."""
    features = [cluster_feature(r) for r in rows]
    cluster_count = len(features)
    features.extend(dangling_feature(d) for d in dangling)

    collection = geojson.FeatureCollection(features)
    collection['metadata'] = {
        'generated': datetime.now().isoformat(),
        'cluster_count': cluster_count,
        'dangling_count': len(features) - cluster_count,
        **(metadata or {}),
    }
    return collection


def write_geojson(
    rows: Iterable[CombinedRow],
    dangling: Iterable[SecondaryRecord],
    path: Path,
    metadata: Optional[Dict] = None
) -> geojson.FeatureCollection:
    """Build the collection and save it to path."""
    collection = build_feature_collection(rows, dangling, metadata)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(collection, f, indent=2)

    logger.info(f"Wrote {len(collection['features'])} features to {path}")
    return collection
