"""
Domain errors raised by the services layer.
Routers translate these to HTTP responses; services never build HTTP errors.
"""


class MarqueeError(Exception):
    """Base class for every library error"""


class CatalogUnavailable(MarqueeError):
    """The catalog API could not be reached or answered with a non-2xx status"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class MediaNotFound(MarqueeError):
    """Media row is absent, or a tv-only operation was called on a movie"""


class EpisodeNotFound(MarqueeError):
    pass


class ConfigurationError(MarqueeError):
    """A required credential or path is not configured"""


class NoCatalogMatch(MarqueeError):
    """A catalog search for an existing media item returned nothing"""
