from functools import lru_cache
import logging
from pathlib import Path

from fastapi import Depends, Header, HTTPException

from luxride.core.config import settings
from luxride.application.exceptions import StoreError
from luxride.application.ports.booking_store import BookingStorePort
from luxride.application.ports.identity import IdentityProviderPort
from luxride.application.ports.preference_suggester import PreferenceSuggesterPort
from luxride.application.ports.profile_store import ProfileStorePort
from luxride.application.ports.wizard_session_store import WizardSessionStorePort
from luxride.application.use_cases.booking_wizard import BookingWizardUseCase
from luxride.application.use_cases.my_trips import ListTripsUseCase
from luxride.application.use_cases.personalize import SavePreferencesUseCase, SuggestPreferencesUseCase
from luxride.application.use_cases.profile import EnsureProfileUseCase, GetProfileUseCase, UpdateProfileUseCase
from luxride.application.use_cases.submit_booking import SubmitBookingUseCase
from luxride.application.utils.session_locks import SessionLocks
from luxride.domain.entities.profile import Profile
from luxride.infrastructure.identity.token_identity import TokenIdentityProvider
from luxride.infrastructure.llm.mock_llm import MockLLM
from luxride.infrastructure.llm.openai_llm import OpenAILLM
from luxride.infrastructure.store.json_store import JsonBookingStore, JsonProfileStore, JsonWizardSessionStore
from luxride.infrastructure.store.memory_store import (
    MemoryBookingStore,
    MemoryProfileStore,
    MemoryWizardSessionStore,
)


logger = logging.getLogger(__name__)


def _use_json_store() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_suggester() -> PreferenceSuggesterPort:
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAILLM()
    logger.info("OPENAI_API_KEY missing; using MockLLM for preference suggestions")
    return MockLLM()


@lru_cache
def get_booking_store() -> BookingStorePort:
    if _use_json_store():
        return JsonBookingStore(data_dir=Path(settings.DATA_DIR) / "bookings")
    return MemoryBookingStore()


@lru_cache
def get_profile_store() -> ProfileStorePort:
    if _use_json_store():
        return JsonProfileStore(data_dir=Path(settings.DATA_DIR) / "profiles")
    return MemoryProfileStore()


@lru_cache
def get_session_store() -> WizardSessionStorePort:
    if _use_json_store():
        return JsonWizardSessionStore(data_dir=Path(settings.DATA_DIR) / "sessions")
    return MemoryWizardSessionStore(max_idle_seconds=settings.SESSION_IDLE_SECONDS)


@lru_cache
def get_session_locks() -> SessionLocks:
    return SessionLocks()


@lru_cache
def get_identity_provider() -> IdentityProviderPort:
    return TokenIdentityProvider(secret=settings.AUTH_TOKEN_SECRET, env=settings.ENV)


def get_wizard_use_case() -> BookingWizardUseCase:
    return BookingWizardUseCase(sessions=get_session_store(), locks=get_session_locks())


def get_submit_use_case() -> SubmitBookingUseCase:
    return SubmitBookingUseCase(
        store=get_booking_store(),
        sessions=get_session_store(),
        locks=get_session_locks(),
        wizard_use_case=get_wizard_use_case(),
    )


def get_trips_use_case() -> ListTripsUseCase:
    return ListTripsUseCase(store=get_booking_store())


def get_profile_use_case() -> GetProfileUseCase:
    return GetProfileUseCase(store=get_profile_store())


def get_update_profile_use_case() -> UpdateProfileUseCase:
    return UpdateProfileUseCase(store=get_profile_store())


def get_suggest_use_case() -> SuggestPreferencesUseCase:
    return SuggestPreferencesUseCase(bookings=get_booking_store(), suggester=get_suggester())


def get_save_preferences_use_case() -> SavePreferencesUseCase:
    return SavePreferencesUseCase(profiles=get_profile_store())


def get_ensure_profile_use_case() -> EnsureProfileUseCase:
    return EnsureProfileUseCase(store=get_profile_store())


def get_current_owner(
    authorization: str | None = Header(None),
    identity: IdentityProviderPort = Depends(get_identity_provider),
    ensure_profile: EnsureProfileUseCase = Depends(get_ensure_profile_use_case),
) -> Profile:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()

    uid = identity.resolve_uid(token)
    if not uid:
        raise HTTPException(status_code=401, detail="Please log in to continue.")
    try:
        return ensure_profile.execute(uid)
    except StoreError as e:
        logger.exception("Failed to resolve owner profile", extra={"reason": str(e)})
        raise HTTPException(status_code=503, detail="Profile service unavailable.")
