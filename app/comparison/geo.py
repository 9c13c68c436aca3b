"""Great-circle distance helpers."""

import math

from app.comparison.models import FinalizedDistance, FinalizedLocation, PotentialLocation

EARTH_RADIUS_MILES = 3959.0


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance between two points in miles, rounded to 2 decimals."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_MILES * c, 2)


def distances_to_finalized(
    location: PotentialLocation,
    finalized: list[FinalizedLocation],
) -> list[FinalizedDistance]:
    """Distance from a potential location to each finalized location in the project."""
    return [
        FinalizedDistance(
            location_id=f.id,
            location_name=f.title,
            distance=calculate_distance(
                location.coordinates.lat,
                location.coordinates.lng,
                f.coordinates.lat,
                f.coordinates.lng,
            ),
        )
        for f in finalized
    ]
