from abc import ABC, abstractmethod

from luxride.domain.entities.wizard_state import WizardSession, WizardState


class WizardSessionStorePort(ABC):
    @abstractmethod
    def create(self, owner_id: str, state: WizardState) -> WizardSession:
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> WizardSession | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, session_id: str, state: WizardState) -> WizardSession:
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str) -> None:
        raise NotImplementedError
