from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from luxride.domain.entities.profile import Profile


class ProfileStorePort(ABC):
    @abstractmethod
    def ensure_profile(self, external_uid: str, email: str | None = None, display_name: str | None = None) -> Profile:
        """
        Map an identity provider uid to its profile, creating one on first sight.
        The returned Profile.id is the internal owner id used everywhere else.
        """
        raise NotImplementedError

    @abstractmethod
    def get_profile(self, owner_id: str) -> Profile | None:
        raise NotImplementedError

    @abstractmethod
    def update_profile(self, owner_id: str, changes: Mapping[str, Any]) -> Profile:
        """Apply a partial update. Raises StoreError if the profile does not exist."""
        raise NotImplementedError
