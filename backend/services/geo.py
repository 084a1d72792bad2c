import math
from typing import Callable, Iterable, TypeVar

from models.destination import Coordinate

T = TypeVar("T")

EARTH_RADIUS_KM = 6371.0


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates (haversine)."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # Rounding can push h a hair outside [0, 1]
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def sort_by_distance(
    origin: Coordinate,
    items: Iterable[T],
    coordinate_of: Callable[[T], Coordinate | None],
) -> list[T]:
    """Stable ascending sort by distance from origin; items without a coordinate go last."""

    def key(item: T) -> float:
        coord = coordinate_of(item)
        if coord is None:
            return math.inf
        return distance_km(origin, coord)

    return sorted(items, key=key)
