from dataclasses import dataclass

from luxride.application.ports.booking_store import BookingStorePort
from luxride.domain.entities.booking import ConfirmedBooking


@dataclass
class ListTripsUseCase:
    store: BookingStorePort

    def execute(self, owner_id: str) -> list[ConfirmedBooking]:
        return self.store.list_confirmed_bookings(owner_id)
