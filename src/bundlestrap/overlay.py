"""Copy a local settings file over the bundle's own settings."""

import logging
import shutil
from pathlib import Path

from bundlestrap import console
from bundlestrap.errors import OverlayError
from bundlestrap.models import BootstrapConfig

log = logging.getLogger(__name__)


class ConfigOverlay:
    def __init__(self, config: BootstrapConfig) -> None:
        self._config = config

    def apply_if_present(
        self, local_path: Path | None = None, dest_path: Path | None = None
    ) -> bool:
        """Copy the local settings into the bundle when they exist.

        Never raises for filesystem problems: a failed copy is reported and
        the run goes on with whatever settings the bundle ended up with.
        Returns True only when the copy completed.
        """
        local = Path(local_path) if local_path is not None else self._config.local_settings
        dest = Path(dest_path) if dest_path is not None else self._config.extracted_settings

        if not local.is_file():
            console.warn("No local settings found, using defaults.")
            return False

        try:
            self._copy(local, dest)
        except OverlayError as e:
            console.fatal("Failed to apply local settings", e)
            return False
        console.success("Local settings applied.")
        return True

    def _copy(self, local: Path, dest: Path) -> None:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(local, dest)
        except OSError as e:
            raise OverlayError(f"{local} -> {dest}: {e}") from e
        log.debug("copied %s to %s", local, dest)
