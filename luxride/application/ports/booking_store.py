from __future__ import annotations

from abc import ABC, abstractmethod

from luxride.domain.entities.booking import BookingDraft, ConfirmedBooking


class BookingStorePort(ABC):
    @abstractmethod
    def create_booking(self, draft: BookingDraft, owner_id: str, age: int | None = None) -> ConfirmedBooking:
        """
        Persist a confirmed booking for `owner_id`.

        Implementations must re-check the guardian rule on their own and raise
        GuardianRequiredError when a minor's draft lacks guardian details.
        Raises StoreError when the write fails.
        """
        raise NotImplementedError

    @abstractmethod
    def list_confirmed_bookings(self, owner_id: str) -> list[ConfirmedBooking]:
        """Confirmed bookings for the owner, latest departure first."""
        raise NotImplementedError
