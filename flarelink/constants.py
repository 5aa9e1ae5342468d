"""
Centralized constants for the flare linkage pipeline.

Import from here to keep defaults consistent between the library,
the config loader and the command line.
"""

# Geodesy
EARTH_RADIUS_KM = 6371.0  # Mean Earth radius used by the haversine formula

# Linkage
DEFAULT_THRESHOLD_KM = 3.0  # Records closer than this to a centroid join the cluster

# Aggregation
DEFAULT_TARGET_YEAR = '2019'  # Primary year averaged per cluster

# Filtering
DEFAULT_COUNTRY = 'Algeria'

# Reporting
HISTOGRAM_BINS = 10
HISTOGRAM_BAR_WIDTH = 50  # Longest histogram bar, in characters
SAMPLE_RECORD_COUNT = 3
COORD_DECIMALS = 6

# Volume parse policies
VOLUME_POLICY_ZERO = 'zero'  # Unparsable volume becomes 0.0
VOLUME_POLICY_SKIP = 'skip'  # Unparsable volume drops the row
VOLUME_POLICIES = (VOLUME_POLICY_ZERO, VOLUME_POLICY_SKIP)

# Default file names
WORLD_BANK_FILE = '2012-2023-individual-flare-volume-estimates.csv'
VIIRS_FILE = 'eog_global_flare_survey_2015_flare_list.csv'
COMBINED_FILE = 'combined_dataset.csv'
DANGLING_FILE = 'dangling_viirs.csv'
GEOJSON_FILE = 'clusters.geojson'
REPORT_FILE = 'analysis_results.txt'
