import logging
import math

from config import settings
from models.destination import Coordinate, ScoredDestination
from services.geo import distance_km
from services.store import Store

logger = logging.getLogger(__name__)

KM_PER_DEGREE = 111.0


def bounding_box_degrees(
    origin: Coordinate,
    radius_km: float,
    adaptive: bool | None = None,
) -> tuple[float, float]:
    """Half-widths (lat, lng) in degrees of the coarse search box.

    The fixed box is a loose overestimate for the default 50 km radius. The
    adaptive box widens the longitude span with latitude so it stays a superset
    of the radius everywhere except right at the poles.
    """
    if not (settings.adaptive_bounding_box if adaptive is None else adaptive):
        return settings.bounding_box_degrees, settings.bounding_box_degrees

    lat_deg = radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(origin.latitude))
    lng_deg = 180.0 if cos_lat < 1e-6 else min(180.0, radius_km / (KM_PER_DEGREE * cos_lat))
    return lat_deg, lng_deg


async def find_nearby(
    store: Store,
    origin: Coordinate | None,
    radius_km: float | None = None,
    adaptive: bool | None = None,
) -> list[ScoredDestination]:
    """Destinations within radius_km of origin, nearest first, with distances attached."""
    if origin is None:
        return []
    radius = settings.nearby_radius_km if radius_km is None else radius_km

    lat_deg, lng_deg = bounding_box_degrees(origin, radius, adaptive)

    def in_box(d) -> bool:
        return (
            origin.latitude - lat_deg <= d.latitude <= origin.latitude + lat_deg
            and origin.longitude - lng_deg <= d.longitude <= origin.longitude + lng_deg
        )

    candidates = await store.find_many("destinations", predicate=in_box)

    nearby = []
    for destination in candidates:
        distance = distance_km(origin, destination.coordinate)
        if distance <= radius:
            nearby.append(ScoredDestination(destination=destination, distance=distance))

    nearby.sort(key=lambda s: s.distance)
    logger.debug("%d coarse candidates, %d within %.1f km", len(candidates), len(nearby), radius)
    return nearby
