"""
Great-circle distance helpers and a rough travel time estimate.

The duration estimate is a heuristic over straight-line distance. It knows
nothing about roads, traffic, terrain or transport mode and must not be read
as a routing result.
"""
import math
import re
from math import radians, sin, cos, sqrt, atan2

EARTH_RADIUS_KM = 6371

SHORT_TRIP = "short"
MEDIUM_TRIP = "medium"
LONG_TRIP = "long"

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate distance between two points on Earth."""
    lng1, lat1, lng2, lat2 = map(radians, [float(lng1), float(lat1), float(lng2), float(lat2)])
    dlng, dlat = lng2 - lng1, lat2 - lat1
    a = sin(dlat / 2)**2 + cos(lat1) * cos(lat2) * sin(dlng / 2)**2
    return EARTH_RADIUS_KM * (2 * atan2(sqrt(a), sqrt(1 - a)))

def format_distance(distance_km: float) -> str:
    """Meters below one kilometer, otherwise kilometers with one decimal."""
    if distance_km < 1:
        return f"{_round_half_up(distance_km * 1000)}m"
    return f"{distance_km:.1f}km"

def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> str:
    return format_distance(haversine_km(lat1, lng1, lat2, lng2))

def parse_distance_magnitude(distance_label: str) -> float:
    """
    Pulls the number out of a label such as '12.3km' or '800m'.
    The unit suffix is ignored, so '800m' reads as 800.
    """
    digits = re.sub(r"[^\d.]", "", distance_label or "")
    try:
        return float(digits)
    except ValueError:
        raise ValueError(f"No distance magnitude in '{distance_label}'")

def travel_time_band(distance: float) -> str:
    # under 50, 50 up to and including 200, above 200
    if distance < 50:
        return SHORT_TRIP
    if distance <= 200:
        return MEDIUM_TRIP
    return LONG_TRIP

def estimate_travel_time(distance_label: str) -> str:
    """Coarse driving time range for a distance label."""
    distance = parse_distance_magnitude(distance_label)
    band = travel_time_band(distance)

    if band == SHORT_TRIP:
        return f"{_round_half_up(distance / 25 * 60)} menit - 1.5 jam"
    if band == MEDIUM_TRIP:
        return f"{_round_half_up(distance / 60)} - {_round_half_up(distance / 50)} jam"
    return f"{_round_half_up(distance / 70)} - {_round_half_up(distance / 50)} jam"
