from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from luxride.application.exceptions import WizardBusyError
from luxride.domain.entities.booking import BookingDraft, ConfirmedBooking


class SessionLocks:
    """
    Per-session guard for wizard transitions and submissions.

    A session is only tracked while someone holds it. Holding never waits,
    and release drops the entry, so idle and abandoned sessions cost nothing.

    Also remembers bookings that were confirmed but whose session could not be
    reset afterwards, so a retry of the same draft is answered without a
    second store write.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._held: set[str] = set()
        self._unreset: dict[str, tuple[BookingDraft, ConfirmedBooking]] = {}

    def is_busy(self, session_id: str) -> bool:
        with self._guard:
            return session_id in self._held

    def tracked(self) -> int:
        with self._guard:
            return len(self._held)

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        """Take the session lock without waiting; WizardBusyError if someone else holds it."""
        with self._guard:
            if session_id in self._held:
                raise WizardBusyError(f"Session {session_id} is busy.")
            self._held.add(session_id)
        try:
            yield
        finally:
            with self._guard:
                self._held.discard(session_id)

    def remember_unreset(self, session_id: str, draft: BookingDraft, booking: ConfirmedBooking) -> None:
        with self._guard:
            self._unreset[session_id] = (draft, booking)

    def unreset_booking(self, session_id: str, draft: BookingDraft) -> ConfirmedBooking | None:
        """The booking already confirmed from exactly this draft, if its session reset is still owed."""
        with self._guard:
            entry = self._unreset.get(session_id)
        if entry is None or entry[0] != draft:
            return None
        return entry[1]

    def forget(self, session_id: str) -> None:
        with self._guard:
            self._unreset.pop(session_id, None)
