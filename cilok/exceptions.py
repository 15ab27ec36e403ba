class CilokError(Exception):
    """Base class for errors raised by the location toolkit."""


class InvalidInput(CilokError):
    """Empty query text or malformed coordinates."""


class NotFound(CilokError):
    """The provider returned no results after every fallback stage."""


class TransportError(CilokError):
    """Network or HTTP failure while talking to a map provider."""


class AIServiceError(CilokError):
    """The completion call failed or returned unusable content."""
