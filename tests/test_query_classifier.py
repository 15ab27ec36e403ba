import pytest

from cilok.agent.query_classifier import (
    TravelLocations,
    detect_place_category,
    extract_coordinates,
    extract_travel_locations,
    is_location_query,
    is_nearby_query,
    is_travel_time_query,
    needs_location_search,
    parse_control_command,
)


def test_travel_query_with_trailing_duration_phrase():
    query = "dari Jakarta ke Bandung berapa jam?"
    assert is_travel_time_query(query)
    assert extract_travel_locations(query) == TravelLocations("Jakarta", "Bandung")


def test_travel_query_keeps_multiword_names():
    locations = extract_travel_locations("Dari Johor Bahru ke Kuala Lumpur berapa lama?")
    assert locations.origin == "Johor Bahru"
    assert locations.destination == "Kuala Lumpur"


def test_travel_query_without_dari():
    locations = extract_travel_locations("jarak Bogor ke Depok")
    assert locations == TravelLocations("Bogor", "Depok")


def test_travel_extraction_without_match_is_not_an_error():
    assert extract_travel_locations("berapa jam perjalanannya") == TravelLocations(None, None)


def test_hotel_query_is_nearby_not_travel():
    query = "hotel terdekat di Bandung"
    assert is_nearby_query(query)
    assert not is_travel_time_query(query)


def test_short_keywords_match_whole_words_only():
    assert not is_travel_time_query("kedai kopi kekinian")


@pytest.mark.parametrize("text,expected", [
    ("exit", "exit"),
    ("  QUIT ", "quit"),
    ("Help", "help"),
    ("status", "status"),
    ("clear screen", None),
])
def test_control_commands(text, expected):
    assert parse_control_command(text) == expected


def test_narrative_keyword_detection():
    assert is_location_query("Alamat lengkapnya ada di Jalan Asia Afrika")
    assert not is_location_query("Terima kasih, semoga membantu!")


def test_needs_location_search_on_narrative():
    assert needs_location_search("Saya akan mencari informasi detail lokasi Gedung Sate.")
    assert not needs_location_search("Sama-sama!")


def test_detect_place_category():
    assert detect_place_category("rumah sakit terdekat di Depok") == "hospital"
    assert detect_place_category("hotel murah di Bali") == "hotel"
    assert detect_place_category("taman kota") is None


def test_extract_coordinates():
    assert extract_coordinates("lokasi dari koordinat -6.1754, 106.8272") == (-6.1754, 106.8272)
    assert extract_coordinates("lokasi dari koordinat 95.1, 106.8") is None
    assert extract_coordinates("Monas Jakarta") is None
