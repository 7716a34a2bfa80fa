"""Exception classes for dotlink - a declarative dotfiles symlinker."""

from typing import TypedDict


# Type definitions for structured data
class ApplyResultDict(TypedDict):
    """Type definition for the outcome of applying a link list."""

    success: int
    failed: int


class DotlinkError(Exception):
    """Base exception for all dotlink-related errors."""

    pass


class HomeDirectoryError(DotlinkError):
    """Raised when the invoking user's home directory cannot be determined."""

    pass


class UnsupportedPlatformError(DotlinkError):
    """Raised when running on a platform without POSIX symlinks."""

    pass


class DotfilesDirNotFoundError(DotlinkError):
    """Raised when the dotfiles directory does not exist."""

    pass


class ConfigError(DotlinkError):
    """Errors related to loading the link list."""

    pass


class ConfigReadError(ConfigError):
    """Raised when the link list cannot be opened or read."""

    pass


class ConfigParseError(ConfigError):
    """Raised when the link list is not valid YAML or has the wrong shape."""

    pass


class LinkError(DotlinkError):
    """Raised when a single link cannot be created."""

    pass
