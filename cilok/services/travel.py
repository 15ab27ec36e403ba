import logging

from cilok.models.schemas import Coordinates, TravelEstimate
from cilok.utils.distance import calculate_distance, estimate_travel_time

logger = logging.getLogger(__name__)


def estimate_trip(geo_provider, origin: str, destination: str) -> TravelEstimate:
    """Geocodes both ends and applies the straight-line distance heuristic."""
    origin_coords = geo_provider.geocode(origin)
    destination_coords = geo_provider.geocode(destination)

    distance = calculate_distance(origin_coords.lat, origin_coords.lng,
                                  destination_coords.lat, destination_coords.lng)
    logger.info(f"{origin} -> {destination}: {distance}")
    return TravelEstimate(
        origin=origin,
        destination=destination,
        origin_coordinates=Coordinates(lat=origin_coords.lat, lng=origin_coords.lng),
        destination_coordinates=Coordinates(lat=destination_coords.lat, lng=destination_coords.lng),
        distance=distance,
        duration=estimate_travel_time(distance),
    )
