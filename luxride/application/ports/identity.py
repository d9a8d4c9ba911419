from abc import ABC, abstractmethod


class IdentityProviderPort(ABC):
    @abstractmethod
    def resolve_uid(self, token: str | None) -> str | None:
        """Return the stable identity-provider uid for a session token, or None if unauthenticated."""
        raise NotImplementedError
