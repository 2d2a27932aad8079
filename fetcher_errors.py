class FetcherError(Exception):
    """Base class for every error that aborts a fetch run."""


class ConfigError(FetcherError):
    pass


class AuthError(FetcherError):
    pass


class RemoteError(FetcherError):
    pass


class TimeError(FetcherError):
    pass


class InvalidTimestamp(TimeError):
    pass


class InvalidTimeZone(TimeError):
    pass


class DownloadError(FetcherError):
    """A planned recording could not be downloaded or written."""


class FilesystemError(DownloadError):
    """The local side of a download failed (directory creation or write)."""


class NotifyError(FetcherError):
    """Sending the summary email failed. Never fatal to a run."""
