"""
Great-circle distance between latitude/longitude points.
"""

import math

from .constants import EARTH_RADIUS_KM


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance in km between two points.

    Args:
        lat1, lon1: First point in decimal degrees
        lat2, lon2: Second point in decimal degrees

    Returns:
        Distance in kilometers. NaN inputs give NaN.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2)**2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2)**2
    # Rounding can push a just past 1 for antipodal points
    a = min(a, 1.0)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))
