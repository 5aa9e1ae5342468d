#!/usr/bin/env python3
"""
Reader for the World Bank individual flare volume estimates.

Columns: COUNTRY, Latitude, Longitude, bcm, MMscfd, Year, Field Type,
Location, Flare Level, Flaring Vol (million m3)
"""

from typing import List

from ..records import PrimaryRecord, WORLD_BANK_COLUMNS
from .base import BaseCsvReader, parse_coordinate


class WorldBankReader(BaseCsvReader[PrimaryRecord]):
    """Parses World Bank rows into PrimaryRecords."""

    source_id = 'world_bank'
    min_fields = len(WORLD_BANK_COLUMNS)

    def parse_row(self, row: List[str]) -> PrimaryRecord:
        lat = parse_coordinate(row[1])
        lon = parse_coordinate(row[2])
        volume = self.parse_volume(row[9])

        return PrimaryRecord(
            country=row[0],
            latitude=lat,
            longitude=lon,
            bcm=row[3],
            mmscfd=row[4],
            year=row[5],
            field_type=row[6],
            location=row[7],
            flare_level=row[8],
            flaring_volume=volume,
        )
