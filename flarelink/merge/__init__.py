"""
Record linkage modules.

Combines the two flaring sources:
- Greedy distance clustering of World Bank records
- Nearest-cluster attachment of VIIRS records
- Dangling record detection
- Per-cluster aggregation
"""

from .aggregate import CombinedRow, aggregate_cluster, aggregate_clusters
from .cluster import Cluster
from .linkage import LinkageResult, attach_secondary, cluster_primary, link_records
