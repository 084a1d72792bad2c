class WanderHubError(Exception):
    """Base class for errors raised by the service layer."""


class NotFoundError(WanderHubError):
    """A destination, user or other record does not exist."""


class ConflictError(WanderHubError):
    """A record with the same unique key already exists."""


class ProviderError(WanderHubError):
    """An external provider failed or returned an unusable payload."""


class PlacesAPIError(ProviderError):
    pass


class PlaceNotFoundError(PlacesAPIError, NotFoundError):
    pass


class LLMError(ProviderError):
    pass
