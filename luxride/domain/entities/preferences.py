from dataclasses import dataclass


@dataclass(frozen=True)
class PreferenceSuggestion:
    preferred_vehicle_type: str
    preferred_temperature: str
    preferred_music_genre: str

    def as_profile_changes(self) -> dict[str, str]:
        return {
            "preferred_vehicle_type": self.preferred_vehicle_type,
            "preferred_temperature": self.preferred_temperature,
            "preferred_music_genre": self.preferred_music_genre,
        }
