from abc import ABC, abstractmethod

from luxride.domain.entities.preferences import PreferenceSuggestion


class PreferenceSuggesterPort(ABC):
    @abstractmethod
    def suggest(self, owner_id: str, past_bookings: str) -> PreferenceSuggestion:
        """
        Suggest ride preferences from a user's history.

        Requirements:
        - `past_bookings` is a JSON array of {vehicleType, temperature, musicGenre}; it may be empty
        - Must return all three preferences as non-empty strings
        - No state is kept between calls

        Raises:
            LLMUpstreamError: provider unreachable or failing
            LLMContractError: provider answered with an unusable payload
        """
        raise NotImplementedError
