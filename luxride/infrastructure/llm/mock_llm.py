from __future__ import annotations

import json
from collections import Counter

from luxride.application.exceptions import LLMContractError
from luxride.application.ports.preference_suggester import PreferenceSuggesterPort
from luxride.domain.entities.preferences import PreferenceSuggestion


class MockLLM(PreferenceSuggesterPort):
    """Offline suggester: picks the most frequent value of each setting."""

    defaults = PreferenceSuggestion(
        preferred_vehicle_type="sedan",
        preferred_temperature="21°C",
        preferred_music_genre="Jazz",
    )

    def suggest(self, owner_id: str, past_bookings: str) -> PreferenceSuggestion:
        try:
            items = json.loads(past_bookings or "[]")
        except json.JSONDecodeError as e:
            raise LLMContractError(f"Suggest: past bookings are not valid JSON: {e}") from e
        if not isinstance(items, list):
            raise LLMContractError("Suggest: past bookings must be a JSON array.")

        def most_common(key: str, fallback: str) -> str:
            values = [str(it.get(key)) for it in items if isinstance(it, dict) and it.get(key)]
            return Counter(values).most_common(1)[0][0] if values else fallback

        return PreferenceSuggestion(
            preferred_vehicle_type=most_common("vehicleType", self.defaults.preferred_vehicle_type),
            preferred_temperature=most_common("temperature", self.defaults.preferred_temperature),
            preferred_music_genre=most_common("musicGenre", self.defaults.preferred_music_genre),
        )
