"""Commercial geocoding backend built on the Google Maps Web Services."""
import logging
from typing import Any, Dict, List, Optional

from cilok.config.settings import ProviderSelection
from cilok.exceptions import CilokError, NotFound, TransportError
from cilok.models.schemas import Coordinates, GeocodeResult, NearbyPlace, Place, PlaceDetails
from cilok.services.geo_provider import GeoProvider, to_coordinates

logger = logging.getLogger(__name__)

# Logical category -> Places API type
GOOGLE_CATEGORY_TYPES = {
    "restaurant": "restaurant",
    "food": "restaurant",
    "cafe": "cafe",
    "hospital": "hospital",
    "pharmacy": "pharmacy",
    "school": "school",
    "bank": "bank",
    "atm": "atm",
    "gas_station": "gas_station",
    "shopping": "shopping_mall",
    "hotel": "lodging",
}

DETAIL_FIELDS = "name,formatted_address,formatted_phone_number,website,opening_hours,rating,reviews"


def _location_of(result: Dict[str, Any]) -> Optional[Coordinates]:
    location = (result.get("geometry") or {}).get("location") or {}
    return to_coordinates(location.get("lat"), location.get("lng"))


class GoogleMapsProvider(GeoProvider):
    name = "Google Maps"
    selection = ProviderSelection.COMMERCIAL

    def _url(self, path: str) -> str:
        return f"{self.config.google_maps_base_url.rstrip('/')}/{path}"

    def _call(self, path: str, params: Dict[str, Any], allow_empty: bool = False) -> Dict[str, Any]:
        data = self._request_json("GET", self._url(path), params={
            **params,
            "key": self.config.google_maps_api_key,
            "language": self.config.default_language,
        })
        status = data.get("status", "OK")
        if status == "ZERO_RESULTS":
            if allow_empty:
                return data
            raise NotFound("Location not found")
        if status != "OK":
            message = data.get("error_message") or "request rejected"
            raise TransportError(f"Google Maps {status}: {message}")
        return data

    def _first_located(self, results: List[Dict[str, Any]], what: str) -> Dict[str, Any]:
        for result in results:
            if _location_of(result) is not None:
                return result
        raise NotFound(f"{what} not found")

    def get_place_details(self, place_id: Optional[str]) -> Optional[PlaceDetails]:
        """Extended details for a place; any failure yields None."""
        if not place_id:
            return None
        try:
            result = self._call("place/details/json", {"place_id": place_id, "fields": DETAIL_FIELDS}).get("result") or {}
        except CilokError as e:
            logger.warning(f"Place details lookup failed for {place_id}: {e}")
            return None
        hours = result.get("opening_hours") or {}
        return PlaceDetails(
            phone=result.get("formatted_phone_number"),
            website=result.get("website"),
            opening_hours=hours.get("weekday_text") or [],
            open_now=hours.get("open_now"),
            rating=result.get("rating"),
            review_count=len(result.get("reviews") or []),
        )

    def _forward_search(self, text: str) -> Place:
        data = self._call("place/textsearch/json", {"query": text, "region": self.config.default_country.lower()})
        place = self._first_located(data.get("results") or [], "Location")
        coords = _location_of(place)
        return Place(
            name=place.get("name") or text,
            formatted_address=place.get("formatted_address") or "",
            coordinates=coords,
            categories=place.get("types") or [],
            rating=place.get("rating"),
            source_id=place.get("place_id"),
            details=self.get_place_details(place.get("place_id")),
            nearby=self._safe_nearby(coords),
        )

    def _geocode(self, address: str) -> GeocodeResult:
        data = self._call("geocode/json", {"address": address, "region": self.config.default_country.lower()})
        result = self._first_located(data.get("results") or [], "Address")
        coords = _location_of(result)
        return GeocodeResult(
            lat=coords.lat,
            lng=coords.lng,
            formatted_address=result.get("formatted_address") or address,
            accuracy=(result.get("geometry") or {}).get("location_type"),
        )

    def _reverse_geocode(self, center: Coordinates) -> Place:
        data = self._call("geocode/json", {"latlng": f"{center.lat},{center.lng}"})
        results = data.get("results") or []
        if not results:
            raise NotFound("No location found for these coordinates")
        result = results[0]
        components = result.get("address_components") or []
        name = components[0].get("long_name") if components else None
        return Place(
            name=name or "Unknown Location",
            formatted_address=result.get("formatted_address") or "",
            coordinates=center,
            categories=result.get("types") or [],
            source_id=result.get("place_id"),
            nearby=self._safe_nearby(center),
        )

    def _nearby_search(self, center: Coordinates, category: Optional[str], radius: int) -> List[NearbyPlace]:
        params = {"location": f"{center.lat},{center.lng}", "radius": radius}
        # Unknown categories search without a type filter.
        place_type = GOOGLE_CATEGORY_TYPES.get((category or "").lower())
        if place_type:
            params["type"] = place_type
        data = self._call("place/nearbysearch/json", params, allow_empty=True)
        places = []
        for result in data.get("results") or []:
            coords = _location_of(result)
            if coords is None or not result.get("name"):
                continue
            places.append(self._nearby_place(
                center, coords,
                name=result["name"],
                formatted_address=result.get("vicinity") or "",
                categories=result.get("types") or [],
                rating=result.get("rating"),
                source_id=result.get("place_id"),
            ))
        return places
