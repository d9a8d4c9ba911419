from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from luxride.application.exceptions import StoreError
from luxride.application.ports.profile_store import ProfileStorePort
from luxride.domain.entities.profile import UPDATABLE_FIELDS, Profile

logger = logging.getLogger(__name__)


@dataclass
class EnsureProfileUseCase:
    """Resolve an identity-provider uid to the internal owner profile."""

    store: ProfileStorePort

    def execute(self, external_uid: str, email: str | None = None, display_name: str | None = None) -> Profile:
        return self.store.ensure_profile(external_uid, email=email, display_name=display_name)


@dataclass
class GetProfileUseCase:
    store: ProfileStorePort

    def execute(self, owner_id: str) -> Profile:
        profile = self.store.get_profile(owner_id)
        if profile is None:
            raise StoreError("Profile not found.")
        return profile


@dataclass(frozen=True)
class ProfileUpdateResult:
    profile: Profile
    changed: bool
    message: str


@dataclass
class UpdateProfileUseCase:
    store: ProfileStorePort

    def execute(self, owner_id: str, changes: Mapping[str, Any]) -> ProfileUpdateResult:
        applied = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}
        if not applied:
            profile = GetProfileUseCase(self.store).execute(owner_id)
            return ProfileUpdateResult(profile=profile, changed=False, message="No changes to update.")

        profile = self.store.update_profile(owner_id, applied)
        logger.info("Profile updated", extra={"owner_id": owner_id, "reason": ",".join(sorted(applied))})
        return ProfileUpdateResult(profile=profile, changed=True, message="Profile updated.")
