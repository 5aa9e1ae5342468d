#!/usr/bin/env python3
"""
Reader for the EOG VIIRS global flare survey list.

Columns: cntry_name, cntry_iso, catalog_id, id_number, latitude, longitude,
flr_volume, avg_temp, ellip, dtc_freq, clr_obs, flr_type
"""

from typing import List

from ..records import SecondaryRecord, VIIRS_COLUMNS
from .base import BaseCsvReader, parse_coordinate


class ViirsReader(BaseCsvReader[SecondaryRecord]):
    """Parses VIIRS survey rows into SecondaryRecords."""

    source_id = 'viirs'
    min_fields = len(VIIRS_COLUMNS)

    def parse_row(self, row: List[str]) -> SecondaryRecord:
        lat = parse_coordinate(row[4])
        lon = parse_coordinate(row[5])
        volume = self.parse_volume(row[6])

        return SecondaryRecord(
            country_name=row[0],
            country_iso=row[1],
            catalog_id=row[2],
            id_number=row[3],
            latitude=lat,
            longitude=lon,
            flare_volume=volume,
            avg_temp=row[7],
            ellipticity=row[8],
            detection_frequency=row[9],
            clear_observations=row[10],
            flare_type=row[11],
        )
