"""Unpack the downloaded archive and check its layout."""

import logging
import zipfile
import zlib
from pathlib import Path

from bundlestrap import console
from bundlestrap.constants import PLUGINS_DIR_NAME
from bundlestrap.errors import ExtractionError
from bundlestrap.models import BootstrapConfig

log = logging.getLogger(__name__)


class ArchiveExtractor:
    def __init__(self, config: BootstrapConfig) -> None:
        self._config = config

    def extract(self, archive_path: Path, dest_dir: Path | None = None) -> Path:
        """Unpack every entry of ``archive_path`` into ``dest_dir``, overwriting.

        Returns the bundle directory. Raises :class:`ExtractionError` if the
        file is not a ZIP archive or the bundle directory is missing after
        extraction.
        """
        dest = Path(dest_dir) if dest_dir is not None else self._config.staging_dir
        try:
            with zipfile.ZipFile(archive_path) as zf:
                names = zf.namelist()
                zf.extractall(dest)
        except zipfile.BadZipFile as e:
            raise ExtractionError(f"{archive_path} is not a valid ZIP archive: {e}") from e
        except (OSError, EOFError, zlib.error) as e:
            raise ExtractionError(f"Unable to extract {archive_path}: {e}") from e
        except (RuntimeError, NotImplementedError) as e:
            # Encrypted members or unsupported compression methods.
            raise ExtractionError(f"Cannot unpack {archive_path}: {e}") from e
        log.debug("extracted %d entries into %s", len(names), dest)

        bundle_dir = dest / self._config.bundle_name
        if not bundle_dir.is_dir():
            raise ExtractionError(f"Expected extracted directory not found: {bundle_dir}")

        if (bundle_dir / PLUGINS_DIR_NAME).is_dir():
            console.success("Plugins folder found.")
        else:
            console.warn("Plugins folder not found.")
        return bundle_dir
