from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping

UPDATABLE_FIELDS = (
    "full_name",
    "date_of_birth",
    "contact_details",
    "preferred_vehicle_type",
    "preferred_temperature",
    "preferred_music_genre",
)


@dataclass(frozen=True)
class Profile:
    id: str  # internal owner id
    external_uid: str  # identity provider uid
    full_name: str = ""
    date_of_birth: str = ""
    contact_details: str = ""
    email: str | None = None
    preferred_vehicle_type: str | None = None
    preferred_temperature: str | None = None
    preferred_music_genre: str | None = None
    updated_at: datetime | None = None

    def with_changes(self, changes: Mapping[str, Any], updated_at: datetime | None = None) -> "Profile":
        applied = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}
        if not applied:
            return self
        return replace(self, updated_at=updated_at or datetime.now(), **applied)
