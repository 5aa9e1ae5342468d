"""
Source readers.

Each source has its own reader that:
1. Reads the raw CSV export (header row skipped)
2. Skips rows with too few fields or unparsable coordinates
3. Applies the volume parse policy
4. Returns typed, immutable records
"""

from .base import BaseCsvReader, SkipRow, filter_by_country
from .viirs import ViirsReader
from .world_bank import WorldBankReader
