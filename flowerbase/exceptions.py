"""Exception types shared by the store, the AI provider and the cache."""


class FlowerBaseError(Exception):
    """Base class for application errors."""


class ValidationError(FlowerBaseError):
    """Record data rejected before it reaches the store."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


class StoreError(FlowerBaseError):
    """The record store or blob storage could not complete an operation."""


class ProviderError(FlowerBaseError):
    """Base class for AI content provider failures."""


class ProviderNotConfiguredError(ProviderError):
    """No credentials for the AI provider."""


class ProviderUnavailableError(ProviderError):
    """Network, HTTP or circuit-breaker failure reaching the provider."""


class ProviderResponseError(ProviderError):
    """Provider answered but the payload could not be parsed or validated."""


class QuotaExceededError(FlowerBaseError):
    """The key-value backend refused a write because it is full."""
