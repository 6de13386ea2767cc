class RSSHaberError(Exception):
    """Base class for every error raised by rss_haber."""


class InvalidArgument(RSSHaberError, ValueError):
    """Raised when a caller passes a keyword, category or option that cannot be served."""


class SourceFetchError(RSSHaberError):
    """Raised when an RSS/Atom feed cannot be fetched or parsed."""

    def __init__(self, message: str, *, source_key: str = "", url: str = "") -> None:
        super().__init__(message)
        self.source_key = source_key
        self.url = url


class AggregationTimeout(RSSHaberError):
    """Raised when a live search exceeds the deadline the caller asked for."""


class PersistenceError(RSSHaberError):
    """Raised when a store cannot write or read a news record."""


class DuplicateRecordError(PersistenceError):
    """Raised when an insert loses a unique-key race on the record URL."""
