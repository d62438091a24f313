"""Exceptions raised while reading container statistics."""


class ExporterError(Exception):
    """Base class for exporter errors."""
    pass


class EnumerationError(ExporterError):
    """Raised when the running containers cannot be listed."""
    pass


class FetchError(ExporterError):
    """Raised when stats for a single container cannot be fetched."""

    def __init__(self, container_id: str, message: str):
        super().__init__(f"{container_id}: {message}")
        self.container_id = container_id


class DecodeError(FetchError):
    """Raised when a stats payload is malformed or has an unexpected shape."""
    pass
