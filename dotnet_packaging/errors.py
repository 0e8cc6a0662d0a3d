from __future__ import annotations


class PackagingError(RuntimeError):
    """A failure reported to the user as plain text, mapped to exit code -1."""


class ProjectResolutionError(PackagingError):
    pass


class PreconditionError(PackagingError):
    pass


class ConfigError(PackagingError):
    pass
