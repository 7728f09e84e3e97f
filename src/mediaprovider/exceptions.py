"""Exception classes shared by all media providers."""


class MediaProviderError(Exception):
    """Base exception for errors raised by a media provider or its backend client."""

    pass


class UnsupportedOperationError(MediaProviderError, NotImplementedError):
    """Operation the backend family cannot perform at all (e.g. scrobbling on Jellyfin).

    Attributes:
        operation: Name of the unsupported operation
        backend: Backend family name
    """

    def __init__(self, operation: str, backend: str):
        self.operation = operation
        self.backend = backend
        super().__init__(f"{operation} is not implemented for {backend}")
