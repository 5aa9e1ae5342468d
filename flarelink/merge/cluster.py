#!/usr/bin/env python3
"""
Incrementally maintained spatial cluster.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..records import PrimaryRecord, SecondaryRecord


@dataclass
class Cluster:
    """
    Records from both sources believed to describe the same flare site.

    The center is the running mean of every member coordinate added so far,
    primary and secondary pooled, and is refreshed after each addition.
    Members are never removed. A cluster with no members has no center.
    """
    primary_records: List[PrimaryRecord] = field(default_factory=list)
    secondary_records: List[SecondaryRecord] = field(default_factory=list)
    sum_lat: float = 0.0
    sum_lon: float = 0.0
    count: int = 0
    center_lat: Optional[float] = None
    center_lon: Optional[float] = None

    @classmethod
    def from_primary(cls, record: PrimaryRecord) -> 'Cluster':
        """Open a new cluster seeded with one primary record."""
        cluster = cls()
        cluster.add_primary(record)
        return cluster

    def add_primary(self, record: PrimaryRecord) -> None:
        self.primary_records.append(record)
        self._add_point(record.latitude, record.longitude)

    def add_secondary(self, record: SecondaryRecord) -> None:
        self.secondary_records.append(record)
        self._add_point(record.latitude, record.longitude)

    def _add_point(self, lat: float, lon: float) -> None:
        self.sum_lat += lat
        self.sum_lon += lon
        self.count += 1
        self.center_lat = self.sum_lat / self.count
        self.center_lon = self.sum_lon / self.count

    @property
    def is_empty(self) -> bool:
        return self.count == 0
