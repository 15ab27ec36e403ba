import json
import logging
import re
from typing import List, Optional

from cilok.exceptions import AIServiceError, InvalidInput, NotFound, TransportError
from cilok.models.schemas import Exhausted, Resolved, ResolutionOutcome, SearchAttempt

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
MAX_CANDIDATES = 5

_QUOTED_PATTERNS = (
    re.compile(r'"([^"]+)"'),
    re.compile(r"“([^”]+)”"),
)
_TRIGGER_PATTERNS = (
    re.compile(r"\bmencari\s+([^.,:\n]+)", re.IGNORECASE),
    re.compile(r"\blokasi\s+([^.,:\n]+)", re.IGNORECASE),
    re.compile(r"\btempat\s+([^.,:\n]+)", re.IGNORECASE),
)
_CAPITALIZED_RUN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\b")


def extract_location_names(narrative: str, original_query: str, limit: int = MAX_CANDIDATES) -> List[str]:
    """
    Derives ordered search candidates from an AI narrative.

    The original query always comes first, followed by quoted phrases,
    phrases after the trigger words mencari/lokasi/tempat, and runs of
    capitalized words. Over-generation is fine: a bad candidate only costs
    one failed lookup.
    """
    found: List[str] = [original_query.strip()]
    narrative = narrative or ""

    for pattern in _QUOTED_PATTERNS:
        found.extend(m.group(1).strip() for m in pattern.finditer(narrative))
    for pattern in _TRIGGER_PATTERNS:
        found.extend(m.group(1).strip() for m in pattern.finditer(narrative))
    found.extend(m.group(1).strip() for m in _CAPITALIZED_RUN.finditer(narrative))

    candidates: List[str] = []
    for name in found:
        if len(name) > 2 and name not in candidates:
            candidates.append(name)
    return candidates[:limit]


class LocationResolver:
    """
    Bounded AI-guided search loop.

    Each attempt asks the LLM for a narrative, turns it into candidates and
    tries them in order against the geo provider. The first hit ends the
    loop. Failures are fed back as context for the next attempt.
    """

    def __init__(self, llm, geo_provider, max_attempts: int = MAX_ATTEMPTS, max_candidates: int = MAX_CANDIDATES):
        self.llm = llm
        self.geo_provider = geo_provider
        self.max_attempts = max_attempts
        self.max_candidates = max_candidates

    @staticmethod
    def _history_json(history: List[SearchAttempt]) -> str:
        return json.dumps([attempt.model_dump() for attempt in history], ensure_ascii=False)

    def _build_context(self, last_error: Optional[str], history: List[SearchAttempt]) -> Optional[str]:
        if last_error is None:
            return None
        return f"Previous error: {last_error}. Results so far: {self._history_json(history)}"

    def resolve(self, query: str) -> ResolutionOutcome:
        history: List[SearchAttempt] = []
        last_error: Optional[str] = None

        for attempt in range(1, self.max_attempts + 1):
            logger.info(f"Attempt {attempt}/{self.max_attempts}: searching with AI guidance for '{query}'")
            context = self._build_context(last_error, history)

            try:
                narrative = self.llm.process_location_query(query, context, attempt - 1)
            except AIServiceError as e:
                logger.warning(f"AI error on attempt {attempt}: {e}")
                last_error = str(e)
                continue

            candidates = extract_location_names(narrative, query, self.max_candidates)
            logger.info(f"AI suggests searching for: {', '.join(candidates)}")

            for candidate in candidates:
                try:
                    place = self.geo_provider.forward_search(candidate)
                except (NotFound, TransportError, InvalidInput) as e:
                    logger.info(f"'{candidate}' not found: {e}")
                    history.append(SearchAttempt(query=candidate, error=str(e)))
                    continue

                logger.info(f"Found location: {place.name}")
                return Resolved(place=place, narrative=narrative, attempt_index=attempt, matched_query=candidate)

            last_error = f"No results found for suggestions: {', '.join(candidates)}"

        # Nothing left to fall back on, so a failure here propagates.
        final_narrative = self.llm.process_location_query(
            f"{query} - Tidak ditemukan setelah {self.max_attempts} percobaan. "
            f"Berikan saran alternatif atau lokasi serupa.",
            f"Search attempts: {self._history_json(history)}",
            self.max_attempts,
        )
        return Exhausted(narrative=final_narrative, attempts=history, attempt_count=self.max_attempts)
