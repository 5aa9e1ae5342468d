#!/usr/bin/env python3
"""
Base class for CSV record readers.
"""

import csv
import logging
import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from ..constants import VOLUME_POLICIES, VOLUME_POLICY_SKIP, VOLUME_POLICY_ZERO

logger = logging.getLogger(__name__)

RecordT = TypeVar('RecordT')


class SkipRow(Exception):
    """Raised by parse_row when a row must not reach the analysis."""


def parse_coordinate(value: str) -> float:
    """
    Parse a latitude or longitude field.

    Raises:
        SkipRow: if the value is not a finite number
    """
    try:
        coord = float(value)
    except (TypeError, ValueError):
        raise SkipRow(f"unparsable coordinate {value!r}")
    if not math.isfinite(coord):
        raise SkipRow(f"non-finite coordinate {value!r}")
    return coord


class BaseCsvReader(ABC, Generic[RecordT]):
    """Base class for source-specific CSV readers."""

    source_id: str = 'base'
    min_fields: int = 0

    def __init__(self, path: Path, invalid_volume: str = VOLUME_POLICY_ZERO):
        if invalid_volume not in VOLUME_POLICIES:
            raise ValueError(f"Unknown volume policy: {invalid_volume}")
        self.path = Path(path)
        self.invalid_volume = invalid_volume
        self.rows_read = 0
        self.rows_skipped = 0
        self.volumes_defaulted = 0

    def parse_volume(self, value: str) -> float:
        """
        Parse a measurement field according to the volume policy.

        With the 'zero' policy an unparsable value becomes 0.0;
        with 'skip' the whole row is dropped.
        """
        try:
            return float(value.strip())
        except (AttributeError, ValueError):
            if self.invalid_volume == VOLUME_POLICY_SKIP:
                raise SkipRow(f"unparsable volume {value!r}")
            self.volumes_defaulted += 1
            return 0.0

    def iter_rows(self) -> Iterable[List[str]]:
        """Yield data rows (header excluded) with leading spaces trimmed."""
        # Invalid bytes become U+FFFD instead of aborting the read
        with open(self.path, newline='', encoding='utf-8', errors='replace') as f:
            reader = csv.reader(f, skipinitialspace=True)
            next(reader, None)
            for row in reader:
                yield row

    @abstractmethod
    def parse_row(self, row: List[str]) -> RecordT:
        """
        Convert one CSV row into a record.

        Raises:
            SkipRow: if the row is malformed
        """
        pass

    def read(self) -> List[RecordT]:
        """
        Read and parse the whole file.

        Malformed rows (too few fields, bad coordinates) are counted and
        skipped. Missing files raise FileNotFoundError.
        """
        records = []
        for row in self.iter_rows():
            self.rows_read += 1
            if len(row) < self.min_fields:
                self.rows_skipped += 1
                logger.debug(f"{self.source_id}: row {self.rows_read} has {len(row)} fields, skipped")
                continue
            try:
                records.append(self.parse_row(row))
            except SkipRow as e:
                self.rows_skipped += 1
                logger.debug(f"{self.source_id}: row {self.rows_read} skipped ({e})")

        logger.info(f"{self.source_id}: loaded {len(records)} records from {self.path} "
                    f"({self.rows_skipped} skipped)")
        if self.volumes_defaulted:
            logger.warning(f"{self.source_id}: {self.volumes_defaulted} unparsable volumes set to 0.0")
        return records

    def stats(self) -> Dict[str, Any]:
        """Counters from the last read."""
        return {
            'source': self.source_id,
            'path': str(self.path),
            'rows_read': self.rows_read,
            'rows_skipped': self.rows_skipped,
            'volumes_defaulted': self.volumes_defaulted,
        }


def filter_by_country(records: Iterable[RecordT], country: Optional[str],
                      attr: str = 'country') -> List[RecordT]:
    """
    Keep records whose country matches, ignoring case.

    Args:
        records: Records to filter
        country: Country name; None keeps everything
        attr: Name of the country attribute on the record type

    Returns:
        Filtered list, input order preserved
    """
    if country is None:
        return list(records)
    wanted = country.casefold()
    return [r for r in records if getattr(r, attr).casefold() == wanted]
