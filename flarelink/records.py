#!/usr/bin/env python3
"""
Typed records for the two flaring sources.

Both record types are immutable once parsed. Auxiliary columns that the
analysis never computes with are kept as the text found in the file.
"""

from dataclasses import dataclass
from typing import List


# Column names as they appear in the source files
WORLD_BANK_COLUMNS = [
    'COUNTRY', 'Latitude', 'Longitude', 'bcm', 'MMscfd', 'Year',
    'Field Type', 'Location', 'Flare Level', 'Flaring Vol (million m3)',
]

VIIRS_COLUMNS = [
    'cntry_name', 'cntry_iso', 'catalog_id', 'id_number', 'latitude', 'longitude',
    'flr_volume', 'avg_temp', 'ellip', 'dtc_freq', 'clr_obs', 'flr_type',
]


@dataclass(frozen=True)
class PrimaryRecord:
    """A World Bank flare volume estimate for one site in one year."""
    country: str
    latitude: float
    longitude: float
    bcm: str
    mmscfd: str
    year: str
    field_type: str
    location: str
    flare_level: str
    flaring_volume: float  # million m3

    def matches_year(self, year: str) -> bool:
        """Compare the year tag, ignoring surrounding whitespace."""
        return self.year.strip() == year.strip()


@dataclass(frozen=True)
class SecondaryRecord:
    """A VIIRS flare survey detection (single survey epoch)."""
    country_name: str
    country_iso: str
    catalog_id: str
    id_number: str
    latitude: float
    longitude: float
    flare_volume: float
    avg_temp: str
    ellipticity: str
    detection_frequency: str
    clear_observations: str
    flare_type: str

    def as_row(self, decimals: int = 6) -> List[str]:
        """Render as a CSV row with fixed-precision numeric fields."""
        return [
            self.country_name,
            self.country_iso,
            self.catalog_id,
            self.id_number,
            f"{self.latitude:.{decimals}f}",
            f"{self.longitude:.{decimals}f}",
            f"{self.flare_volume:.{decimals}f}",
            self.avg_temp,
            self.ellipticity,
            self.detection_frequency,
            self.clear_observations,
            self.flare_type,
        ]
