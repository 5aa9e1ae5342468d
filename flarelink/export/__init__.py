"""
Output writers.

- export_csv: combined dataset and dangling records as CSV
- export_geojson: cluster map layer
- report: plain-text analysis report
"""

from .export_csv import write_combined, write_dangling
from .export_geojson import build_feature_collection, write_geojson
from .report import build_report, write_report
