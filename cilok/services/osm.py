"""Free geocoding backend: Nominatim for search and reverse, Overpass for nearby POIs."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from cilok.config.settings import ProviderSelection
from cilok.exceptions import NotFound
from cilok.models.schemas import Coordinates, GeocodeResult, NearbyPlace, Place
from cilok.services.geo_provider import GeoProvider, to_coordinates

logger = logging.getLogger(__name__)

# Logical category -> (OSM key, tag value regex)
OSM_CATEGORY_TAGS: Dict[str, Tuple[str, str]] = {
    "restaurant": ("amenity", "restaurant|cafe|fast_food|food_court"),
    "food": ("amenity", "restaurant|cafe|fast_food|food_court"),
    "cafe": ("amenity", "cafe"),
    "hospital": ("amenity", "hospital|clinic|pharmacy"),
    "pharmacy": ("amenity", "pharmacy"),
    "school": ("amenity", "school|university|college"),
    "bank": ("amenity", "bank|atm"),
    "atm": ("amenity", "atm"),
    "gas_station": ("amenity", "fuel"),
    "shopping": ("shop", "mall|supermarket|department_store|convenience"),
    "hotel": ("tourism", "hotel|guest_house|hostel|motel"),
}
DEFAULT_OSM_TAGS = ("amenity", "restaurant|cafe|fast_food|bank|hospital|school|fuel")


def convert_category_to_osm(category: Optional[str]) -> Tuple[str, str]:
    return OSM_CATEGORY_TAGS.get((category or "").lower(), DEFAULT_OSM_TAGS)


def build_overpass_query(center: Coordinates, category: Optional[str], radius: int) -> str:
    key, pattern = convert_category_to_osm(category)
    area = f'["{key}"~"{pattern}"](around:{radius},{center.lat},{center.lng})'
    return (
        "[out:json][timeout:25];\n"
        "(\n"
        f"  node{area};\n"
        f"  way{area};\n"
        f"  relation{area};\n"
        ");\n"
        "out center;"
    )


def build_address_from_tags(tags: Dict[str, str]) -> str:
    parts = [tags[k] for k in ("addr:street", "addr:city", "addr:state") if tags.get(k)]
    return ", ".join(parts)


class OSMProvider(GeoProvider):
    name = "OpenStreetMap"
    selection = ProviderSelection.FREE

    @property
    def search_url(self) -> str:
        return f"{self.config.nominatim_base_url.rstrip('/')}/search"

    @property
    def reverse_url(self) -> str:
        return f"{self.config.nominatim_base_url.rstrip('/')}/reverse"

    def _search(self, query: str, limit: int) -> List[Dict[str, Any]]:
        """Country-constrained search first, then a global search if nothing came back."""
        params = {
            "q": query,
            "format": "json",
            "addressdetails": 1,
            "limit": limit,
            "accept-language": self.config.default_language,
        }
        results = self._request_json(
            "GET", self.search_url,
            params={**params, "countrycodes": self.config.default_country.lower()},
        )
        logger.debug(f"Nominatim returned {len(results or [])} results for '{query}'")
        if not results:
            logger.debug(f"Retrying '{query}' without country restriction...")
            results = self._request_json("GET", self.search_url, params=params)
        if not results:
            raise NotFound(f'Location "{query}" not found')
        return results

    def _first_with_coordinates(self, query: str, results: List[Dict[str, Any]]) -> Tuple[Dict[str, Any], Coordinates]:
        for item in results:
            coords = to_coordinates(item.get("lat"), item.get("lon"))
            if coords is not None:
                return item, coords
        raise NotFound(f'Location "{query}" has no usable coordinates')

    def _place_from_item(self, item: Dict[str, Any], coords: Coordinates, nearby: List[NearbyPlace]) -> Place:
        display_name = item.get("display_name") or ""
        name = item.get("name") or display_name.split(",")[0].strip() or "Unknown Location"
        source_id = None
        if item.get("osm_type") and item.get("osm_id") is not None:
            source_id = f"{item['osm_type']}/{item['osm_id']}"
        return Place(
            name=name,
            formatted_address=display_name,
            coordinates=coords,
            categories=[c for c in (item.get("type"), item.get("class")) if c],
            source_id=source_id,
            nearby=nearby,
        )

    def _forward_search(self, text: str) -> Place:
        item, coords = self._first_with_coordinates(text, self._search(text, limit=5))
        logger.debug(f"Found: {item.get('display_name')} at {coords.lat}, {coords.lng}")
        return self._place_from_item(item, coords, self._safe_nearby(coords))

    def _geocode(self, address: str) -> GeocodeResult:
        item, coords = self._first_with_coordinates(address, self._search(address, limit=1))
        importance = item.get("importance")
        return GeocodeResult(
            lat=coords.lat,
            lng=coords.lng,
            formatted_address=item.get("display_name") or address,
            accuracy=str(importance) if importance is not None else None,
        )

    def _reverse_geocode(self, center: Coordinates) -> Place:
        data = self._request_json("GET", self.reverse_url, params={
            "lat": center.lat,
            "lon": center.lng,
            "format": "json",
            "addressdetails": 1,
            "zoom": 18,
            "accept-language": self.config.default_language,
        })
        if not data or "error" in data:
            raise NotFound("No location found for these coordinates")
        return self._place_from_item(data, center, self._safe_nearby(center))

    def _nearby_search(self, center: Coordinates, category: Optional[str], radius: int) -> List[NearbyPlace]:
        query = build_overpass_query(center, category, radius)
        data = self._request_json(
            "POST", self.config.overpass_url,
            content=query.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )
        key, _ = convert_category_to_osm(category)
        places = []
        for element in (data or {}).get("elements", []):
            tags = element.get("tags") or {}
            if not tags.get("name"):
                continue
            center_info = element.get("center") or {}
            coords = to_coordinates(
                element.get("lat", center_info.get("lat")),
                element.get("lon", center_info.get("lon")),
            )
            if coords is None:
                continue
            places.append(self._nearby_place(
                center, coords,
                name=tags["name"],
                formatted_address=build_address_from_tags(tags),
                categories=[c for c in (tags.get(key), tags.get("cuisine")) if c],
                source_id=f"{element.get('type')}/{element.get('id')}",
            ))
        return places
