"""Custom exceptions for the filewatch package."""


class WatcherError(Exception):
    """Base exception for all filewatch errors."""
    pass


class ConfigurationError(WatcherError):
    """Watch configuration is invalid; the session is not started."""
    pass


class DirectoryNotFoundError(ConfigurationError):
    """Watch directory does not exist or is not a directory."""
    pass


class InvalidExtensionError(ConfigurationError):
    """Extension filter is malformed."""
    pass


class SourceError(WatcherError):
    """The underlying file system observer failed."""
    pass


class StoreError(WatcherError):
    """Error related to the persisted event history."""
    pass


class InjectionError(WatcherError):
    """A manual file creation could not be performed."""
    pass

