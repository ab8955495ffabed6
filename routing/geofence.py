#Purpose: Block geofencing math.
#Great-circle distances between (lat, lon) pairs and drop-off accuracy
#relative to a destination block.
#Typical responsibilities:
#haversine distance in meters
#coordinate range validation (callers validate before measuring)
#distance from a drop-off point to a block's canonical coordinate
#Output: plain floats in meters, no rounding.

import math
from typing import Tuple

#internal coordinate type :(lat,lon)
LatLon = Tuple[float, float]

EARTH_RADIUS_M = 6_371_000.0


def is_valid_coordinate(lat: float, lon: float) -> bool:
    """
    True when lat is within [-90, 90] and lon within [-180, 180].
    haversine_meters itself never checks this.
    """
    try:
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        return False
    if math.isnan(lat) or math.isnan(lon):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def haversine_meters(a: LatLon, b: LatLon) -> float:
    """
    Great-circle surface distance between two (lat, lon) points in degrees.

    Returns:
        distance in meters, symmetric in its arguments and 0 for a == b.
    """
    lat1, lon1 = a
    lat2, lon2 = b

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    h = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    # float error can push h a hair past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_M * c


def distance_from_block(dropoff: LatLon, location) -> float:
    """
    How far (meters) a drop-off landed from the location's block coordinate.
    `location` is anything with .latitude and .longitude.
    """
    return haversine_meters(dropoff, (location.latitude, location.longitude))
