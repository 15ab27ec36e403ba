from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Union, Literal

# --- Schemas for geocoding results ---

class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)

class PlaceDetails(BaseModel):
    """Extended details only the commercial backend can provide."""
    model_config = ConfigDict(frozen=True)

    phone: Optional[str] = None
    website: Optional[str] = None
    opening_hours: List[str] = Field(default_factory=list)
    open_now: Optional[bool] = None
    rating: Optional[float] = None
    review_count: int = 0

class PlaceBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    formatted_address: str = ""
    coordinates: Optional[Coordinates] = None
    categories: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    source_id: Optional[str] = None

class NearbyPlace(PlaceBase):
    distance: str = Field(..., description="Human readable distance from the search center, e.g. '240m'.")
    distance_m: float = Field(..., ge=0.0)

class Place(PlaceBase):
    nearby: List[NearbyPlace] = Field(default_factory=list, max_length=5)
    details: Optional[PlaceDetails] = None

class GeocodeResult(BaseModel):
    """Plain address to coordinates lookup, without nearby enrichment."""
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    formatted_address: str
    accuracy: Optional[str] = None

# --- Schemas for the resolution loop ---

class SearchAttempt(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    error: str

class Resolved(BaseModel):
    success: Literal[True] = True
    place: Place
    narrative: str
    attempt_index: int = Field(..., ge=1)
    matched_query: str

class Exhausted(BaseModel):
    success: Literal[False] = False
    narrative: str
    attempts: List[SearchAttempt] = Field(default_factory=list)
    attempt_count: int = Field(..., ge=1, description="Number of outer iterations performed.")

ResolutionOutcome = Union[Resolved, Exhausted]

class TravelEstimate(BaseModel):
    origin: str
    destination: str
    origin_coordinates: Coordinates
    destination_coordinates: Coordinates
    distance: str
    duration: str = Field(..., description="Coarse haversine-based heuristic, not a routing result.")

# --- Request bodies for the HTTP API ---

class ResolveRequest(BaseModel):
    query: str

class GeocodeRequest(BaseModel):
    address: str

class ReverseGeocodeRequest(BaseModel):
    lat: float
    lng: float

class NearbyRequest(BaseModel):
    location: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    category: Optional[str] = None

class TravelRequest(BaseModel):
    origin: str
    destination: str
