from typing import Callable, Dict, List, Optional

import httpx
import pytest

from cilok.config.settings import ProviderSelection, Settings
from cilok.exceptions import NotFound
from cilok.models.schemas import Coordinates, GeocodeResult, NearbyPlace, Place


@pytest.fixture
def config() -> Settings:
    return Settings(
        _env_file=None,
        openrouter_api_key="test-key",
        google_maps_api_key=None,
        mapbox_api_key=None,
        geocoding_user_agent="cilok-tests/1.0",
    )


@pytest.fixture
def commercial_config(config) -> Settings:
    return config.model_copy(update={"google_maps_api_key": "maps-key"})


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def make_place(name: str, lat: float = -6.2, lng: float = 106.8) -> Place:
    return Place(name=name, formatted_address=f"{name}, Indonesia", coordinates=Coordinates(lat=lat, lng=lng))


class FakeLLM:
    """Returns scripted narratives and records every call."""

    def __init__(self, narratives: Optional[List] = None, final: str = "Coba cari tempat serupa."):
        self.narratives = list(narratives or [])
        self.final = final
        self.calls = []

    def process_location_query(self, query, context=None, retry_count=0):
        self.calls.append({"query": query, "context": context, "retry_count": retry_count})
        if self.narratives:
            item = self.narratives.pop(0)
        else:
            item = self.final
        if isinstance(item, Exception):
            raise item
        return item


class FakeGeoProvider:
    """Forward search succeeds only for names in `known`."""
    selection = ProviderSelection.FREE

    def __init__(self, known: Optional[Dict[str, Place]] = None, nearby: Optional[List[NearbyPlace]] = None):
        self.known = known or {}
        self.nearby = nearby or []
        self.searched: List[str] = []
        self.geocoded: List[str] = []

    def forward_search(self, text):
        self.searched.append(text)
        if text in self.known:
            return self.known[text]
        raise NotFound(f'Location "{text}" not found')

    def geocode(self, address):
        self.geocoded.append(address)
        place = self.known.get(address)
        if place is None:
            raise NotFound("Address not found")
        return GeocodeResult(lat=place.coordinates.lat, lng=place.coordinates.lng,
                             formatted_address=place.formatted_address)

    def reverse_geocode(self, lat, lng):
        return make_place("Monas", lat, lng)

    def nearby_search(self, lat, lng, category=None, radius=None):
        return self.nearby

    def search_nearby(self, location, category="restaurant"):
        self.geocode(location)
        return self.nearby
