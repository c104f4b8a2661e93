"""Error types raised by the bootstrap pipeline.

Stages before launch raise these and let them propagate to the single
top-level handler in :mod:`bundlestrap.pipeline`. ``OverlayError``,
``PreconditionError`` and ``SpawnError`` are reported where they happen and
never reach that handler.
"""


class BootstrapError(RuntimeError):
    """Base class for every pipeline failure."""


class StagingError(BootstrapError):
    """The staging directory could not be cleared or recreated."""


class NetworkError(BootstrapError):
    """The archive could not be downloaded."""


class ExtractionError(BootstrapError):
    """The archive could not be unpacked into the expected layout."""


class OverlayError(BootstrapError):
    """The local settings file could not be copied into the bundle."""


class PreconditionError(BootstrapError):
    """The bundle is not launchable (missing directory or entry point)."""


class SpawnError(BootstrapError):
    """The operating system failed to create the child process."""


class ConfigError(ValueError):
    """Configuration could not be loaded or failed validation."""
