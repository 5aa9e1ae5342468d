"""
Spatial reconciliation of gas-flaring survey datasets.

Links World Bank flare volume estimates (primary, one row per site and year)
with VIIRS flare survey detections (secondary, one snapshot) by greedy
distance clustering, then aggregates each cluster for regression analysis.
"""

__version__ = '0.1.0'
