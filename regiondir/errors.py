from __future__ import annotations


class RegionDirError(Exception):
    """Base for every error raised by the directory build and the edge router."""
    pass


class ConfigError(RegionDirError):
    """Raised at an entry point when required configuration is missing."""
    pass


class FetchError(RegionDirError):
    """Raised when rows cannot be read from the source. Always fatal to a run."""
    pass


class BuildError(RegionDirError):
    """Raised when a run cannot complete after rows were fetched."""
    pass


class WriteError(BuildError):
    """Raised when the artifact cannot be persisted. The prior artifact is left in place."""
    pass


class ArtifactError(RegionDirError):
    """Raised when an existing artifact is missing or unreadable."""
    pass


class RouteUpstreamError(RegionDirError):
    """Raised when the edge router's forwarded request to the origin fails."""

    def __init__(self, message: str, *, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out
