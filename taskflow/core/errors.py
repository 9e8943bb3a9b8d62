from __future__ import annotations


class TaskflowError(Exception):
    pass


class ConfigurationError(TaskflowError):
    pass


class NotConfiguredError(ConfigurationError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"{provider} API key not configured")
        self.provider = provider


class ProviderError(TaskflowError):
    pass


class TransportError(ProviderError):
    pass


class MalformedProviderResponse(ProviderError):
    pass


class StoreError(TaskflowError):
    pass
