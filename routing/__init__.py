#Marks routing as a package.
#Re-exports the geo helpers so other modules import from routing
#without knowing internal file names.
#No business logic.

from .geofence import (
    EARTH_RADIUS_M,
    LatLon,
    distance_from_block,
    haversine_meters,
    is_valid_coordinate,
)

__all__ = [
    "EARTH_RADIUS_M",
    "LatLon",
    "distance_from_block",
    "haversine_meters",
    "is_valid_coordinate",
]
