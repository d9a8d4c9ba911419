class LLMUpstreamError(RuntimeError):
    """Raised when LLM provider fails (timeouts, network errors, service unavailable)."""
    pass


class LLMContractError(RuntimeError):
    """Raised when LLM adapter violates contract (bad format or missing data)."""
    pass


class StoreError(RuntimeError):
    """Raised when a store cannot read or write (unreachable, missing record, write failed)."""
    pass


class GuardianRequiredError(ValueError):
    """Raised by the booking store when a minor's booking lacks guardian details."""
    pass


class SessionNotFoundError(LookupError):
    pass


class WizardBusyError(RuntimeError):
    """Raised when a wizard session is touched while its submission is in flight."""
    pass
