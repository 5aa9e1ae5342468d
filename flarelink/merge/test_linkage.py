#!/usr/bin/env python3
"""
Tests for clusters and the two-phase linkage.

Creates small in-memory record sets and checks the clustering rules.
"""

import math

import pytest

from flarelink.geo import haversine_km
from flarelink.merge.cluster import Cluster
from flarelink.merge.linkage import (
    attach_secondary,
    cluster_primary,
    find_first_within,
    find_nearest,
    link_records,
)
from flarelink.records import PrimaryRecord, SecondaryRecord


def wb(lat, lon, year='2019', volume=1.0, country='Algeria'):
    """Create a sample World Bank record."""
    return PrimaryRecord(
        country=country, latitude=lat, longitude=lon, bcm='', mmscfd='',
        year=year, field_type='Oil', location='Onshore', flare_level='Upstream',
        flaring_volume=volume,
    )


def viirs(lat, lon, volume=1.0, catalog_id='VNF_e0', country='Algeria'):
    """Create a sample VIIRS record."""
    return SecondaryRecord(
        country_name=country, country_iso='DZA', catalog_id=catalog_id, id_number='1',
        latitude=lat, longitude=lon, flare_volume=volume, avg_temp='1800',
        ellipticity='0.2', detection_frequency='0.5', clear_observations='100',
        flare_type='upstream',
    )


def test_centroid_is_running_mean():
    """Center after each addition equals the mean of every coordinate so far."""
    points = [(31.0, 6.0), (31.01, 6.02), (30.99, 5.97), (31.02, 6.01)]
    cluster = Cluster.from_primary(wb(*points[0]))

    for i, (lat, lon) in enumerate(points[1:], start=2):
        if i % 2:
            cluster.add_primary(wb(lat, lon))
        else:
            cluster.add_secondary(viirs(lat, lon))
        added = points[:i]
        assert cluster.count == i
        assert math.isclose(cluster.center_lat, sum(p[0] for p in added) / i, rel_tol=1e-12)
        assert math.isclose(cluster.center_lon, sum(p[1] for p in added) / i, rel_tol=1e-12)

    assert len(cluster.primary_records) == 2
    assert len(cluster.secondary_records) == 2
    print("  ✓ running centroid matches recomputed mean")


def test_centroid_pools_both_sources():
    """Center is the mean of all members, not the mean of the two source means."""
    cluster = Cluster.from_primary(wb(0.0, 0.0))
    cluster.add_primary(wb(0.0, 0.0))
    cluster.add_secondary(viirs(0.0, 0.003))

    assert math.isclose(cluster.center_lon, 0.001)
    assert not math.isclose(cluster.center_lon, (0.0 + 0.003) / 2)


def test_nearby_primary_records_merge():
    clusters = cluster_primary([wb(0.0, 0.0), wb(0.0, 0.001), wb(0.0, 1.0)])

    assert len(clusters) == 2
    assert len(clusters[0].primary_records) == 2
    assert len(clusters[1].primary_records) == 1
    assert clusters[1].center_lon == 1.0
    print("  ✓ (0,0)+(0,0.001) merged, (0,1) separate")


def test_primary_first_fit_not_nearest():
    """A primary record joins the first qualifying cluster even if a later one is closer."""
    # Clusters at lon 0 and lon 0.04 (~4.4 km apart); record at 0.025 is
    # ~2.8 km from the first and ~1.7 km from the second.
    clusters = cluster_primary([wb(0.0, 0.0), wb(0.0, 0.04), wb(0.0, 0.025)])

    assert len(clusters) == 2
    assert len(clusters[0].primary_records) == 2
    assert len(clusters[1].primary_records) == 1


def test_primary_clustering_is_order_dependent():
    """Moving centers make the result depend on input order."""
    a, b, c = wb(0.0, 0.0, volume=1.0), wb(0.0, 0.02, volume=2.0), wb(0.0, 0.045, volume=3.0)

    # a, b share a center at 0.01; c is ~3.9 km away
    forward = cluster_primary([a, b, c])
    # c, b share a center at 0.0325; a is ~3.6 km away
    backward = cluster_primary([c, b, a])

    assert [cl.primary_records for cl in forward] == [[a, b], [c]]
    assert [cl.primary_records for cl in backward] == [[c, b], [a]]


def test_threshold_is_strict():
    step = 0.001
    dist = haversine_km(0.0, step, 0.0, 0.0)
    clusters = cluster_primary([wb(0.0, 0.0), wb(0.0, step)], threshold_km=dist)
    assert len(clusters) == 2

    clusters = cluster_primary([wb(0.0, 0.0), wb(0.0, step)], threshold_km=dist * 1.01)
    assert len(clusters) == 1


def test_secondary_nearest_fit():
    """Secondary records join the nearest cluster, not the first within range."""
    clusters = cluster_primary([wb(0.0, 0.0), wb(0.0, 0.04)])
    dangling = attach_secondary(clusters, [viirs(0.0, 0.025)])

    assert dangling == []
    assert len(clusters[0].secondary_records) == 0
    assert len(clusters[1].secondary_records) == 1
    print("  ✓ secondary record attached to nearest cluster")


def test_secondary_out_of_range_is_dangling():
    clusters = cluster_primary([wb(0.0, 0.0)])
    far = viirs(0.0, 1.0, catalog_id='far')
    near = viirs(0.0, 0.0005, catalog_id='near')
    dangling = attach_secondary(clusters, [far, near])

    assert dangling == [far]
    assert clusters[0].secondary_records == [near]


def test_secondary_without_clusters_is_dangling():
    records = [viirs(0.0, 0.0), viirs(1.0, 1.0)]
    result = link_records([], records)

    assert result.clusters == []
    assert result.dangling == records


def test_secondary_moves_center_for_later_records_only():
    clusters = cluster_primary([wb(0.0, 0.0)])
    first = viirs(0.0, 0.02, catalog_id='first')  # ~2.2 km
    second = viirs(0.0, 0.035, catalog_id='second')  # ~3.9 km from the seed

    # second is beyond range of the seed, but first pulls the center to 0.01
    dangling = attach_secondary(clusters, [first, second])

    assert dangling == []
    assert clusters[0].secondary_records == [first, second]

    clusters = cluster_primary([wb(0.0, 0.0)])
    dangling = attach_secondary(clusters, [second, first])
    assert dangling == [second]


def test_every_secondary_accounted_once():
    primary = [wb(31.0 + i * 0.1, 6.0, volume=i) for i in range(5)]
    secondary = [viirs(31.0 + i * 0.05, 6.0 + (i % 3) * 0.01, catalog_id=f"v{i}")
                 for i in range(12)]
    result = link_records(primary, secondary)

    attached = [r for c in result.clusters for r in c.secondary_records]
    assert len(attached) + len(result.dangling) == len(secondary)
    ids = [r.catalog_id for r in attached] + [r.catalog_id for r in result.dangling]
    assert sorted(ids) == sorted(r.catalog_id for r in secondary)
    assert result.matched_secondary == len(attached)


def test_no_primary_record_dropped():
    primary = [wb(31.0 + (i % 4) * 0.02, 6.0 + (i % 3) * 0.03, year=str(2012 + i % 8))
               for i in range(40)]
    result = link_records(primary, [])

    members = [r for c in result.clusters for r in c.primary_records]
    assert len(members) == len(primary)
    assert sum(c.count for c in result.clusters) == len(primary)


def test_linkage_is_deterministic():
    primary = [wb(28.0 + (i * 7 % 11) * 0.01, 9.0 + (i * 3 % 5) * 0.02) for i in range(30)]
    secondary = [viirs(28.0 + (i * 5 % 13) * 0.01, 9.0 + (i % 4) * 0.02, catalog_id=str(i))
                 for i in range(25)]

    def snapshot():
        result = link_records(primary, secondary)
        return (
            [(c.center_lat, c.center_lon, c.primary_records, c.secondary_records)
             for c in result.clusters],
            result.dangling,
        )

    assert snapshot() == snapshot()


def test_find_nearest_tie_goes_to_first():
    a = Cluster.from_primary(wb(0.0, -0.01))
    b = Cluster.from_primary(wb(0.0, 0.01))
    nearest, dist = find_nearest([a, b], 0.0, 0.0)
    assert nearest is a
    assert dist > 0


def test_empty_cluster_has_no_center():
    empty = Cluster()
    assert empty.is_empty
    assert empty.center_lat is None
    assert empty.center_lon is None

    # an empty cluster is never a match, even at (0, 0)
    assert find_first_within([empty], 0.0, 0.0, 3.0) is None
    assert find_nearest([empty], 0.0, 0.0) == (None, float('inf'))

    seeded = Cluster.from_primary(wb(0.0, 0.01))
    nearest, _ = find_nearest([empty, seeded], 0.0, 0.0)
    assert nearest is seeded
    assert find_first_within([empty, seeded], 0.0, 0.0, 3.0) is seeded


def test_non_positive_threshold_rejected():
    with pytest.raises(ValueError):
        cluster_primary([wb(0.0, 0.0)], threshold_km=0)
    with pytest.raises(ValueError):
        attach_secondary([], [viirs(0.0, 0.0)], threshold_km=-1.0)


if __name__ == '__main__':
    test_centroid_is_running_mean()
    test_centroid_pools_both_sources()
    test_nearby_primary_records_merge()
    test_primary_first_fit_not_nearest()
    test_primary_clustering_is_order_dependent()
    test_threshold_is_strict()
    test_secondary_nearest_fit()
    test_secondary_out_of_range_is_dangling()
    test_secondary_without_clusters_is_dangling()
    test_secondary_moves_center_for_later_records_only()
    test_every_secondary_accounted_once()
    test_no_primary_record_dropped()
    test_linkage_is_deterministic()
    test_find_nearest_tie_goes_to_first()
    test_empty_cluster_has_no_center()
    test_non_positive_threshold_rejected()
    print("\n✓ All linkage tests passed!")
