"""Ephemeral staging directory for downloads and extracted bundles."""

import logging
import os
import shutil
import sys
from pathlib import Path

from bundlestrap import console
from bundlestrap.errors import StagingError
from bundlestrap.models import BootstrapConfig

log = logging.getLogger(__name__)


def _ignore_vanished(func, path, exc) -> None:
    """rmtree error hook that tolerates entries removed underneath us."""
    # onerror passes an exc_info tuple, onexc the exception itself.
    error = exc[1] if isinstance(exc, tuple) else exc
    if isinstance(error, FileNotFoundError):
        log.debug("%s already gone during cleanup", path)
        return
    raise error


def _rmtree(path: Path) -> None:
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_ignore_vanished)
    else:
        shutil.rmtree(path, onerror=_ignore_vanished)


class StagingStore:
    """Owns the staging root for one pipeline run.

    Every run starts from an empty directory; nothing is cached between runs.
    """

    def __init__(self, config: BootstrapConfig) -> None:
        self._config = config

    @property
    def root(self) -> Path:
        return self._config.staging_root

    @property
    def directory(self) -> Path:
        return self._config.staging_dir

    def prepare(self) -> Path:
        """Wipe any stale staging tree and recreate it empty."""
        root = self.root
        if root.exists():
            console.warn("Cleaning previous cache...")
            try:
                if root.is_dir() and not root.is_symlink():
                    _rmtree(root)
                else:
                    root.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StagingError(f"Unable to clear staging directory {root}: {e}") from e

        directory = self.directory
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(f"Unable to create staging directory {directory}: {e}") from e
        log.debug("staging directory ready at %s", directory)
        return directory

    def cleanup_artifact(self, path: Path) -> None:
        """Remove a temporary file if it is still there."""
        try:
            os.unlink(path)
        except FileNotFoundError:
            return
        except OSError as e:
            log.debug("could not remove %s: %s", path, e)
            return
        log.debug("removed %s", path)
