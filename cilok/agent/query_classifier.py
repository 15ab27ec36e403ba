"""
Keyword and pattern based intent detection for Indonesian location queries.

Precedence when several classifiers match: travel time, then nearby, then
general conversation.
"""
import re
from typing import NamedTuple, Optional, Tuple

CONTROL_COMMANDS = ("exit", "quit", "help", "clear", "status")

TRAVEL_KEYWORDS = ("berapa jam", "berapa lama", "jarak", "waktu tempuh", "dari", "ke")

NEARBY_KEYWORDS = ("hotel", "restoran", "rumah sakit", "bank", "terdekat", "di daerah", "sekitar")

LOCATION_KEYWORDS = (
    "mencari", "lokasi", "tempat", "alamat", "koordinat",
    "detail", "dimana", "di mana", "letak", "berada",
    "hotel", "rumah sakit", "restoran", "bank",
)

SEARCH_TRIGGER_PHRASES = (
    "mencari", "akan mencari", "saya akan mencari",
    "detail lokasi", "koordinat", "alamat",
)

# Indonesian POI words -> logical nearby category
CATEGORY_KEYWORDS = (
    ("rumah sakit", "hospital"),
    ("klinik", "hospital"),
    ("apotek", "pharmacy"),
    ("rumah makan", "restaurant"),
    ("tempat makan", "restaurant"),
    ("restoran", "restaurant"),
    ("kafe", "cafe"),
    ("cafe", "cafe"),
    ("sekolah", "school"),
    ("kampus", "school"),
    ("universitas", "school"),
    ("atm", "atm"),
    ("bank", "bank"),
    ("spbu", "gas_station"),
    ("pom bensin", "gas_station"),
    ("mall", "shopping"),
    ("belanja", "shopping"),
    ("penginapan", "hotel"),
    ("hotel", "hotel"),
)

TRAVEL_PATTERNS = (
    re.compile(r"\bdari\s+(.+?)\s+ke\s+(.+)", re.IGNORECASE),
    re.compile(r"^\s*(.+?)\s+ke\s+(.+)", re.IGNORECASE),
)

_DESTINATION_TAIL = re.compile(r"(\?.*$)|(\s+(berapa|butuh|perlu|memakan|naik)\b.*$)", re.IGNORECASE)
_ORIGIN_PREFIX = re.compile(r"^(jarak|waktu tempuh|perjalanan)\s+", re.IGNORECASE)

COORDINATE_PATTERN = re.compile(r"(-?\d{1,2}\.\d+)\s*[,;]\s*(-?\d{1,3}\.\d+)")


class TravelLocations(NamedTuple):
    origin: Optional[str]
    destination: Optional[str]


def _contains_word(text: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}\b", text) is not None


def parse_control_command(text: str) -> Optional[str]:
    command = (text or "").strip().lower()
    return command if command in CONTROL_COMMANDS else None


def is_travel_time_query(text: str) -> bool:
    lowered = (text or "").lower()
    return any(_contains_word(lowered, keyword) for keyword in TRAVEL_KEYWORDS)


def extract_travel_locations(text: str) -> TravelLocations:
    """First matching pattern wins; no match is a normal outcome."""
    for pattern in TRAVEL_PATTERNS:
        match = pattern.search(text or "")
        if not match:
            continue
        origin = _ORIGIN_PREFIX.sub("", match.group(1).strip()).strip()
        destination = _DESTINATION_TAIL.sub("", match.group(2).strip()).strip()
        if origin and destination:
            return TravelLocations(origin, destination)
    return TravelLocations(None, None)


def is_nearby_query(text: str) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in NEARBY_KEYWORDS)


def is_location_query(text: str) -> bool:
    """Whether a narrative mentions enough location vocabulary to search on it."""
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in LOCATION_KEYWORDS)


def needs_location_search(narrative: str) -> bool:
    lowered = (narrative or "").lower()
    return any(phrase in lowered for phrase in SEARCH_TRIGGER_PHRASES)


def detect_place_category(text: str) -> Optional[str]:
    lowered = (text or "").lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if _contains_word(lowered, keyword):
            return category
    return None


def extract_coordinates(text: str) -> Optional[Tuple[float, float]]:
    match = COORDINATE_PATTERN.search(text or "")
    if not match:
        return None
    lat, lng = float(match.group(1)), float(match.group(2))
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return lat, lng
