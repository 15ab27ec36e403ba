import logging
from typing import Callable, List, Optional

from cilok.agent.query_classifier import (
    detect_place_category,
    extract_coordinates,
    extract_travel_locations,
    is_location_query,
    is_nearby_query,
    is_travel_time_query,
    needs_location_search,
    parse_control_command,
)
from cilok.agent.resolution_loop import LocationResolver
from cilok.config.settings import Settings, ProviderSelection
from cilok.exceptions import CilokError
from cilok.models.schemas import Exhausted, NearbyPlace, Place, ResolutionOutcome, TravelEstimate
from cilok.services.travel import estimate_trip

logger = logging.getLogger(__name__)

RULE = "━" * 40

HELP_TEXT = """
🍡 CILOK COMMANDS

Location Queries:
• "tampilkan detail lokasi [nama tempat]"
• "dari [asal] ke [tujuan] berapa jam?"
• "lokasi dari koordinat [lat, lng]"
• "hotel terdekat di [lokasi]"

System Commands:
• help - Show this help
• status - Show service status
• clear - Clear screen
• exit/quit - Exit Cilok
"""


class CilokSession:
    """Single-session read-eval loop: one query is handled to completion before the next."""

    def __init__(self, config: Settings, llm, geo_provider, resolver: Optional[LocationResolver] = None,
                 output: Callable[[str], None] = print, input_func: Callable[[str], str] = input):
        self.config = config
        self.llm = llm
        self.geo_provider = geo_provider
        self.resolver = resolver or LocationResolver(llm, geo_provider, max_attempts=config.ai_max_attempts)
        self.output = output
        self.input_func = input_func
        self.is_running = False

    # --- Loop ---

    def run(self):
        self.show_welcome()
        self.is_running = True
        while self.is_running:
            try:
                line = self.input_func("🍡 Cilok > ")
            except (EOFError, KeyboardInterrupt):
                self.output("👋 Goodbye!")
                self.is_running = False
                break
            self.is_running = self.handle(line)

    def handle(self, line: str) -> bool:
        """Handles one input line. Returns False when the session should end."""
        query = (line or "").strip()
        if not query:
            return True

        command = parse_control_command(query)
        if command:
            return self.run_command(command)

        try:
            self.process_query(query)
        except CilokError as e:
            logger.debug(f"Query '{query}' failed: {e}")
            self.output(f"❌ {e}")
        return True

    def run_command(self, command: str) -> bool:
        if command in ("exit", "quit"):
            self.output("👋 Goodbye!")
            return False
        if command == "help":
            self.output(HELP_TEXT)
        elif command == "clear":
            self.output("\033[2J\033[H")
            self.show_welcome()
        elif command == "status":
            self.show_service_status()
        return True

    def process_query(self, query: str):
        coordinates = extract_coordinates(query)
        if coordinates:
            self.handle_reverse_geocode(*coordinates)
        elif is_travel_time_query(query):
            self.handle_travel_time_query(query)
        elif is_nearby_query(query):
            self.handle_nearby_query(query)
        else:
            self.handle_general_query(query)

    # --- Handlers ---

    def handle_reverse_geocode(self, lat: float, lng: float):
        self.output("🗺️  Reverse geocoding...")
        self.render_place(self.geo_provider.reverse_geocode(lat, lng))

    def handle_travel_time_query(self, query: str):
        locations = extract_travel_locations(query)
        if not (locations.origin and locations.destination):
            self.output("⚠️  Lokasi asal atau tujuan tidak terdeteksi")
            self.output(self.llm.process_location_query(query))
            return

        try:
            trip = estimate_trip(self.geo_provider, locations.origin, locations.destination)
        except CilokError as e:
            self.output(f"❌ Gagal menghitung rute: {e}")
            self.output(self.llm.process_location_query(query))
            return
        self.render_travel(trip)

    def handle_nearby_query(self, query: str):
        self.output("🏨 Mencari tempat yang Anda inginkan...")
        outcome = self.resolver.resolve(query)
        self.render_outcome(outcome)

        category = detect_place_category(query)
        if outcome.success and category and outcome.place.coordinates:
            coords = outcome.place.coordinates
            try:
                places = self.geo_provider.nearby_search(coords.lat, coords.lng, category)
            except CilokError as e:
                self.output(f"❌ Pencarian {category} terdekat gagal: {e}")
                return
            self.render_nearby(places, title=f"🏪 {category.upper()} TERDEKAT")

    def handle_general_query(self, query: str):
        narrative = self.llm.process_location_query(query)
        self.output(narrative)

        if needs_location_search(narrative):
            self.output("\n🔍 Memulai pencarian lokasi intelligent...")
            self.render_outcome(self.resolver.resolve(query))
        elif is_location_query(narrative):
            self.output("\n🔍 Memulai pencarian lokasi intelligent...")
            self.render_outcome(self.resolver.resolve(narrative))

    # --- Rendering ---

    def show_welcome(self):
        self.output("🍡 CILOK - AI Agent for Location Toolkit")
        self.output('Type "help" for available commands\n')

    def show_service_status(self):
        selection = self.geo_provider.selection
        self.output("\n🔧 SERVICE STATUS")
        self.output(RULE)
        self.output(f"✓ OpenRouter AI ({self.config.ai_model})")
        if selection == ProviderSelection.COMMERCIAL:
            self.output("✓ Google Maps API (Premium, active)")
        else:
            self.output("○ Google Maps API (Not configured)")
            self.output("✓ OpenStreetMap / Nominatim / Overpass (Free, active)")
        self.output(f"{'✓' if self.config.mapbox_api_key else '○'} Mapbox API")
        self.output("")

    def render_outcome(self, outcome: ResolutionOutcome):
        if isinstance(outcome, Exhausted):
            self.output(f"\n🤔 Setelah {outcome.attempt_count} percobaan, lokasi tidak ditemukan.\n")
            self.output(outcome.narrative)
            if outcome.attempts:
                self.output("\n📝 Riwayat pencarian:")
                for index, attempt in enumerate(outcome.attempts, start=1):
                    self.output(f'  {index}. "{attempt.query}" - {attempt.error}')
            return

        self.output(f"\n🎉 Berhasil ditemukan setelah {outcome.attempt_index} percobaan!")
        self.output(f'Search query: "{outcome.matched_query}"\n')
        self.output(outcome.narrative)
        self.render_place(outcome.place)

    def render_place(self, place: Place):
        self.output("\n📍 DETAIL LOKASI")
        self.output(RULE)
        self.output(f"🏢 {place.name}")
        if place.formatted_address:
            self.output(f"📮 {place.formatted_address}")
        if place.coordinates:
            self.output(f"🎯 Koordinat: {place.coordinates.lat}, {place.coordinates.lng}")
        if place.categories:
            self.output(f"🏷️  Kategori: {', '.join(place.categories)}")
        if place.rating:
            self.output(f"⭐ Rating: {place.rating}/5")
        if place.details:
            if place.details.phone:
                self.output(f"📞 {place.details.phone}")
            if place.details.website:
                self.output(f"🌐 {place.details.website}")
            for line in place.details.opening_hours:
                self.output(f"🕒 {line}")
        if place.nearby:
            self.render_nearby(place.nearby, title="🏪 Tempat Terdekat:")
        self.output("")

    def render_nearby(self, places: List[NearbyPlace], title: str = "🏪 NEARBY PLACES"):
        self.output(f"\n{title}")
        if not places:
            self.output("  (tidak ada hasil)")
        for index, place in enumerate(places, start=1):
            self.output(f"  {index}. {place.name} ({place.distance})")
            if place.formatted_address:
                self.output(f"     📍 {place.formatted_address}")

    def render_travel(self, trip: TravelEstimate):
        self.output("\n🚗 INFORMASI PERJALANAN")
        self.output(RULE)
        self.output(f"{trip.origin} → {trip.destination}")
        self.output(f"📏 Jarak: {trip.distance}")
        self.output(f"⏱️  Estimasi waktu: {trip.duration} (perkiraan garis lurus)")
        self.output(f"\n📍 {trip.origin}: {trip.origin_coordinates.lat}, {trip.origin_coordinates.lng}")
        self.output(f"📍 {trip.destination}: {trip.destination_coordinates.lat}, {trip.destination_coordinates.lng}\n")
