from dataclasses import replace

from pullers.models import Puller
from routing.geofence import is_valid_coordinate
from ..exceptions import InvalidValue, MissingField


def handle_location_report(puller: Puller, latitude, longitude) -> Puller:
    """
    Called whenever a puller's device reports where they are.
    Only the coordinate changes; online status is toggled separately.
    """
    if latitude is None or longitude is None:
        raise MissingField("latitude and longitude are required")

    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise InvalidValue("Location must be numeric")

    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise InvalidValue("Location must be numeric")

    if not is_valid_coordinate(lat, lon):
        raise InvalidValue(f"Location out of range: ({lat}, {lon})")

    # Because Puller is a frozen dataclass, we must return a new instance via replace
    return replace(puller, location=(lat, lon))


def handle_status_toggle(puller: Puller, is_online) -> Puller:
    """
    Going online does not require a location; such a puller just never
    shows up in nearby lookups until they report one.
    """
    if not isinstance(is_online, bool):
        raise InvalidValue(f"is_online must be a boolean, got {is_online!r}")

    return replace(puller, is_online=is_online)
