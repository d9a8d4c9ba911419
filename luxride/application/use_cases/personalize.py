from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from luxride.application.ports.booking_store import BookingStorePort
from luxride.application.ports.preference_suggester import PreferenceSuggesterPort
from luxride.application.ports.profile_store import ProfileStorePort
from luxride.domain.entities.booking import ConfirmedBooking, PastBooking
from luxride.domain.entities.preferences import PreferenceSuggestion
from luxride.domain.entities.profile import Profile

DEFAULT_TEMPERATURE = "21°C"

logger = logging.getLogger(__name__)


def summarize_trip(booking: ConfirmedBooking) -> PastBooking:
    # Bookings carry no climate or music fields; both are derived for the suggester.
    requests = (booking.allergies_or_requests or "").lower()
    return PastBooking(
        vehicle_type=booking.preferred_vehicle,
        temperature=DEFAULT_TEMPERATURE,
        music_genre="As Requested" if "music" in requests else "Pop",
    )


@dataclass(frozen=True)
class SuggestionResult:
    suggestion: PreferenceSuggestion
    trip_count: int


@dataclass
class SuggestPreferencesUseCase:
    bookings: BookingStorePort
    suggester: PreferenceSuggesterPort

    def execute(self, owner_id: str) -> SuggestionResult:
        trips = self.bookings.list_confirmed_bookings(owner_id)
        past = [summarize_trip(b).to_payload() for b in trips]
        if not past:
            logger.info("No past bookings for personalization", extra={"owner_id": owner_id})

        suggestion = self.suggester.suggest(owner_id, json.dumps(past, ensure_ascii=False))
        logger.info("Preferences suggested", extra={"owner_id": owner_id})
        return SuggestionResult(suggestion=suggestion, trip_count=len(past))


@dataclass
class SavePreferencesUseCase:
    profiles: ProfileStorePort

    def execute(self, owner_id: str, suggestion: PreferenceSuggestion) -> Profile:
        return self.profiles.update_profile(owner_id, suggestion.as_profile_changes())
