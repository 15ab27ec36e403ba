import pytest
from fastapi.testclient import TestClient

from conftest import FakeGeoProvider, FakeLLM, make_place
from cilok.agent.resolution_loop import LocationResolver
from cilok.api.endpoints import get_geo_provider, get_llm, get_resolver
from cilok.api.main import app
from cilok.exceptions import InvalidInput, TransportError
from cilok.models.schemas import Coordinates, NearbyPlace


class StrictGeoProvider(FakeGeoProvider):
    def reverse_geocode(self, lat, lng):
        if not -90 <= lat <= 90:
            raise InvalidInput(f"Invalid coordinates: lat={lat}, lng={lng}")
        return super().reverse_geocode(lat, lng)

    def nearby_search(self, lat, lng, category=None, radius=None):
        if category == "atm":
            raise TransportError("Overpass API returned HTTP 504")
        return super().nearby_search(lat, lng, category, radius)


@pytest.fixture
def geo():
    cafe = NearbyPlace(name="Kopi Kenangan", coordinates=Coordinates(lat=-6.176, lng=106.827),
                       distance="67m", distance_m=67.0)
    return StrictGeoProvider(
        known={
            "Monas": make_place("Monas", -6.1754, 106.8272),
            "Bandung": make_place("Bandung", -6.9175, 107.6191),
        },
        nearby=[cafe],
    )


@pytest.fixture
def llm():
    return FakeLLM(["Saya akan mencari Monas."])


@pytest.fixture
def client(geo, llm):
    app.dependency_overrides[get_geo_provider] = lambda: geo
    app.dependency_overrides[get_llm] = lambda: llm
    app.dependency_overrides[get_resolver] = lambda: LocationResolver(llm, geo)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_resolve_returns_resolved_outcome(client, geo):
    response = client.post("/api/v1/resolve", json={"query": "  Monas  "})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["matched_query"] == "Monas"
    assert body["attempt_index"] == 1
    assert body["place"]["coordinates"] == {"lat": -6.1754, "lng": 106.8272}
    assert geo.searched == ["Monas"]


def test_resolve_returns_exhausted_outcome(client, llm):
    llm.narratives.clear()
    response = client.post("/api/v1/resolve", json={"query": "tempat antah berantah"})

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is False
    assert body["attempt_count"] == 3
    assert body["attempts"]


def test_resolve_rejects_blank_query(client, llm):
    response = client.post("/api/v1/resolve", json={"query": "   "})

    assert response.status_code == 400
    assert llm.calls == []


def test_geocode_not_found_is_404(client):
    response = client.post("/api/v1/geocode", json={"address": "Atlantis"})
    assert response.status_code == 404


def test_reverse_geocode(client):
    ok = client.post("/api/v1/reverse", json={"lat": -6.1754, "lng": 106.8272})
    bad = client.post("/api/v1/reverse", json={"lat": 95.0, "lng": 106.8})

    assert ok.status_code == 200
    assert ok.json()["name"] == "Monas"
    assert bad.status_code == 400


def test_nearby_by_coordinates_and_by_name(client, geo):
    by_point = client.post("/api/v1/nearby", json={"lat": -6.1754, "lng": 106.8272, "category": "cafe"})
    by_name = client.post("/api/v1/nearby", json={"location": "Monas"})

    assert by_point.json()[0]["name"] == "Kopi Kenangan"
    assert by_name.status_code == 200
    assert geo.geocoded == ["Monas"]


def test_nearby_errors(client):
    missing = client.post("/api/v1/nearby", json={"category": "cafe"})
    upstream = client.post("/api/v1/nearby", json={"lat": -6.1754, "lng": 106.8272, "category": "atm"})

    assert missing.status_code == 400
    assert upstream.status_code == 502


def test_travel_estimate(client):
    response = client.post("/api/v1/travel", json={"origin": "Monas", "destination": "Bandung"})

    body = response.json()
    assert response.status_code == 200
    assert body["origin"] == "Monas"
    assert body["distance"].endswith("km")
    assert "jam" in body["duration"]


def test_status_reports_active_provider(client):
    body = client.get("/api/v1/status").json()

    assert body["provider"] == "free"
    assert "ai_model" in body
