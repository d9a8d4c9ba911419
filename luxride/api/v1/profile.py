import logging

from fastapi import APIRouter, Depends, HTTPException

from luxride.api.v1.schemas import (
    PreferencesSchema,
    ProfileSchema,
    ProfileUpdateResponseSchema,
    ProfileUpdateSchema,
    SuggestionResponseSchema,
)
from luxride.application.exceptions import LLMContractError, LLMUpstreamError, StoreError
from luxride.application.use_cases.personalize import SavePreferencesUseCase, SuggestPreferencesUseCase
from luxride.application.use_cases.profile import GetProfileUseCase, UpdateProfileUseCase
from luxride.domain.entities.preferences import PreferenceSuggestion
from luxride.domain.entities.profile import Profile
from luxride.wiring.dependencies import (
    get_current_owner,
    get_profile_use_case,
    get_save_preferences_use_case,
    get_suggest_use_case,
    get_update_profile_use_case,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/profile", response_model=ProfileSchema)
def get_profile(
    owner: Profile = Depends(get_current_owner),
    uc: GetProfileUseCase = Depends(get_profile_use_case),
):
    try:
        profile = uc.execute(owner.id)
    except StoreError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ProfileSchema.from_entity(profile)


@router.patch("/profile", response_model=ProfileUpdateResponseSchema)
def update_profile(
    req: ProfileUpdateSchema,
    owner: Profile = Depends(get_current_owner),
    uc: UpdateProfileUseCase = Depends(get_update_profile_use_case),
):
    try:
        result = uc.execute(owner.id, req.model_dump(exclude_unset=True))
    except StoreError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ProfileUpdateResponseSchema(
        profile=ProfileSchema.from_entity(result.profile),
        changed=result.changed,
        message=result.message,
    )


@router.post("/profile/preferences/suggest", response_model=SuggestionResponseSchema)
def suggest_preferences(
    owner: Profile = Depends(get_current_owner),
    uc: SuggestPreferencesUseCase = Depends(get_suggest_use_case),
):
    try:
        result = uc.execute(owner.id)
    except StoreError as e:
        logger.error("Could not fetch trip history", extra={"owner_id": owner.id, "reason": str(e)})
        raise HTTPException(status_code=503, detail="Unable to retrieve past booking data for personalization.")
    except (LLMUpstreamError, LLMContractError) as e:
        logger.error("Personalization failed", extra={"owner_id": owner.id, "reason": str(e)})
        raise HTTPException(status_code=502, detail=str(e))

    s = result.suggestion
    return SuggestionResponseSchema(
        suggestion=PreferencesSchema(
            preferred_vehicle_type=s.preferred_vehicle_type,
            preferred_temperature=s.preferred_temperature,
            preferred_music_genre=s.preferred_music_genre,
        ),
        trip_count=result.trip_count,
    )


@router.put("/profile/preferences", response_model=ProfileSchema)
def save_preferences(
    req: PreferencesSchema,
    owner: Profile = Depends(get_current_owner),
    uc: SavePreferencesUseCase = Depends(get_save_preferences_use_case),
):
    suggestion = PreferenceSuggestion(
        preferred_vehicle_type=req.preferred_vehicle_type,
        preferred_temperature=req.preferred_temperature,
        preferred_music_genre=req.preferred_music_genre,
    )
    try:
        profile = uc.execute(owner.id, suggestion)
    except StoreError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ProfileSchema.from_entity(profile)
