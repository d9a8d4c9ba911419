from fastapi import APIRouter, Depends, HTTPException

from luxride.api.v1.schemas import BookingSchema
from luxride.application.exceptions import StoreError
from luxride.application.use_cases.my_trips import ListTripsUseCase
from luxride.domain.entities.profile import Profile
from luxride.wiring.dependencies import get_current_owner, get_trips_use_case

router = APIRouter()


@router.get("/trips", response_model=list[BookingSchema])
def my_trips(
    owner: Profile = Depends(get_current_owner),
    uc: ListTripsUseCase = Depends(get_trips_use_case),
):
    try:
        bookings = uc.execute(owner.id)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [BookingSchema.from_entity(b) for b in bookings]
