import logging
from functools import lru_cache
from typing import List, Union

from fastapi import APIRouter, Depends, HTTPException, status

from cilok.agent.llm_interface import LLMInterface
from cilok.agent.resolution_loop import LocationResolver
from cilok.config.settings import settings
from cilok.exceptions import AIServiceError, CilokError, InvalidInput, NotFound, TransportError
from cilok.models.schemas import (
    Exhausted, GeocodeRequest, GeocodeResult, NearbyPlace, NearbyRequest, Place,
    ResolveRequest, Resolved, ReverseGeocodeRequest, TravelEstimate, TravelRequest,
)
from cilok.services.geo_provider import GeoProvider, create_geo_provider
from cilok.services.travel import estimate_trip

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Location"])


# Use lru_cache so the provider selection is resolved once per process.
@lru_cache()
def get_geo_provider() -> GeoProvider:
    return create_geo_provider(settings)

@lru_cache()
def get_llm() -> LLMInterface:
    return LLMInterface(settings)

def get_resolver(geo_provider: GeoProvider = Depends(get_geo_provider),
                 llm: LLMInterface = Depends(get_llm)) -> LocationResolver:
    return LocationResolver(llm, geo_provider, max_attempts=settings.ai_max_attempts)


def _to_http_error(e: CilokError) -> HTTPException:
    if isinstance(e, InvalidInput):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, (TransportError, AIServiceError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/resolve", response_model=Union[Resolved, Exhausted])
def resolve_location(request: ResolveRequest, resolver: LocationResolver = Depends(get_resolver)):
    """Runs the AI-guided resolution loop for a free-text query."""
    if not request.query.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Query must not be empty.")
    try:
        return resolver.resolve(request.query.strip())
    except CilokError as e:
        raise _to_http_error(e)

@router.post("/geocode", response_model=GeocodeResult)
def geocode_address(request: GeocodeRequest, geo_provider: GeoProvider = Depends(get_geo_provider)):
    try:
        return geo_provider.geocode(request.address)
    except CilokError as e:
        raise _to_http_error(e)

@router.post("/reverse", response_model=Place)
def reverse_geocode(request: ReverseGeocodeRequest, geo_provider: GeoProvider = Depends(get_geo_provider)):
    try:
        return geo_provider.reverse_geocode(request.lat, request.lng)
    except CilokError as e:
        raise _to_http_error(e)

@router.post("/nearby", response_model=List[NearbyPlace])
def nearby_places(request: NearbyRequest, geo_provider: GeoProvider = Depends(get_geo_provider)):
    """Nearby search around either a place name or explicit coordinates."""
    try:
        if request.lat is not None and request.lng is not None:
            return geo_provider.nearby_search(request.lat, request.lng, request.category)
        if request.location:
            return geo_provider.search_nearby(request.location, request.category or "restaurant")
    except CilokError as e:
        raise _to_http_error(e)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Provide either location or lat/lng.")

@router.post("/travel", response_model=TravelEstimate)
def travel_estimate(request: TravelRequest, geo_provider: GeoProvider = Depends(get_geo_provider)):
    """Straight-line distance and a coarse duration range; not a routing result."""
    try:
        return estimate_trip(geo_provider, request.origin, request.destination)
    except CilokError as e:
        raise _to_http_error(e)

@router.get("/status", response_model=dict, tags=["Settings"])
def service_status(geo_provider: GeoProvider = Depends(get_geo_provider)):
    return {
        "provider": geo_provider.selection.value,
        "ai_model": settings.ai_model,
        "google_maps_configured": bool(settings.google_maps_api_key),
        "mapbox_configured": bool(settings.mapbox_api_key),
    }
