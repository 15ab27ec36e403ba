import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from cilok.config.settings import Settings, ProviderSelection, resolve_provider_selection
from cilok.exceptions import CilokError, InvalidInput, TransportError
from cilok.models.schemas import Coordinates, GeocodeResult, NearbyPlace, Place
from cilok.utils.distance import format_distance, haversine_km

logger = logging.getLogger(__name__)

CATEGORY_SEARCH_RADIUS_M = 1000
GENERIC_NEARBY_RADIUS_M = 500
MAX_EMBEDDED_NEARBY = 5


def to_coordinates(lat: Any, lng: Any) -> Optional[Coordinates]:
    """Builds Coordinates from raw provider values, or None when they are unusable."""
    try:
        lat_f, lng_f = float(lat), float(lng)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        return None
    if not (-90 <= lat_f <= 90 and -180 <= lng_f <= 180):
        return None
    return Coordinates(lat=lat_f, lng=lng_f)


class GeoProvider:
    """
    Uniform interface over one geocoding backend.

    Subclasses implement the underscore methods; the public methods validate
    input and are what the rest of the toolkit calls.
    """
    name = "geo-provider"
    selection: ProviderSelection

    def __init__(self, config: Settings, client: Optional[httpx.Client] = None):
        self.config = config
        self.headers = {"User-Agent": config.geocoding_user_agent}
        self.client = client or httpx.Client(timeout=config.http_timeout, headers=self.headers)

    # --- Public operations ---

    def forward_search(self, text: str) -> Place:
        """Free text to a single place record with coordinates."""
        return self._forward_search(self._require_text(text))

    def geocode(self, address: str) -> GeocodeResult:
        """Address to coordinates, without any nearby enrichment."""
        return self._geocode(self._require_text(address))

    def reverse_geocode(self, lat: float, lng: float) -> Place:
        center = self._require_coordinates(lat, lng)
        return self._reverse_geocode(center)

    def nearby_search(self, lat: float, lng: float, category: Optional[str] = None,
                      radius: Optional[int] = None) -> List[NearbyPlace]:
        """Places around a point, nearest first."""
        center = self._require_coordinates(lat, lng)
        if radius is None:
            radius = CATEGORY_SEARCH_RADIUS_M if category else GENERIC_NEARBY_RADIUS_M
        places = self._nearby_search(center, category, radius)
        return sorted(places, key=lambda p: p.distance_m)

    def search_nearby(self, location: str, category: str = "restaurant") -> List[NearbyPlace]:
        """Geocodes a location name, then searches for the category around it."""
        coords = self.geocode(location)
        return self.nearby_search(coords.lat, coords.lng, category, radius=CATEGORY_SEARCH_RADIUS_M)

    def close(self):
        self.client.close()

    # --- Backend hooks ---

    def _forward_search(self, text: str) -> Place:
        raise NotImplementedError

    def _geocode(self, address: str) -> GeocodeResult:
        raise NotImplementedError

    def _reverse_geocode(self, center: Coordinates) -> Place:
        raise NotImplementedError

    def _nearby_search(self, center: Coordinates, category: Optional[str], radius: int) -> List[NearbyPlace]:
        raise NotImplementedError

    # --- Shared helpers ---

    def _require_text(self, text: str) -> str:
        if not isinstance(text, str) or not text.strip():
            raise InvalidInput("Search text must be a non-empty string.")
        return text.strip()

    def _require_coordinates(self, lat: Any, lng: Any) -> Coordinates:
        coords = to_coordinates(lat, lng)
        if coords is None:
            raise InvalidInput(f"Invalid coordinates: lat={lat}, lng={lng}")
        return coords

    def _request_json(self, method: str, url: str, **kwargs) -> Any:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        try:
            response = self.client.request(method, url, headers=headers,
                                           timeout=self.config.http_timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(f"{self.name} returned HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Error connecting to {self.name}: {e}") from e
        except ValueError as e:
            raise TransportError(f"{self.name} returned an unreadable response: {e}") from e

    def _nearby_place(self, center: Coordinates, coords: Coordinates, **fields) -> NearbyPlace:
        distance_km = haversine_km(center.lat, center.lng, coords.lat, coords.lng)
        return NearbyPlace(
            coordinates=coords,
            distance=format_distance(distance_km),
            distance_m=distance_km * 1000,
            **fields,
        )

    def _safe_nearby(self, center: Coordinates) -> List[NearbyPlace]:
        """Nearby enrichment for a primary result; failures never fail the parent call."""
        try:
            return self.nearby_search(center.lat, center.lng)[:MAX_EMBEDDED_NEARBY]
        except CilokError as e:
            logger.warning(f"Nearby search around {center.lat},{center.lng} failed: {e}")
            return []


def create_geo_provider(config: Settings, selection: Optional[ProviderSelection] = None,
                        client: Optional[httpx.Client] = None) -> GeoProvider:
    """Builds the single backend used for the whole run."""
    # Imported here to keep the backends free to import this module.
    from cilok.services.google_maps import GoogleMapsProvider
    from cilok.services.osm import OSMProvider

    selection = selection or resolve_provider_selection(config)
    if selection == ProviderSelection.COMMERCIAL:
        logger.info("Geocoding via Google Maps Web Services.")
        return GoogleMapsProvider(config, client=client)
    logger.info("Geocoding via free OpenStreetMap services (Nominatim + Overpass).")
    return OSMProvider(config, client=client)
