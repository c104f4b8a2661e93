"""Sequence the bootstrap stages for one run.

Stages run strictly in order: prepare staging, fetch, extract, overlay
settings, launch. Any failure before launch aborts the run; the downloaded
archive is removed however the fetch/extract stage ends.
"""

import logging
from pathlib import Path

from bundlestrap import console
from bundlestrap.errors import BootstrapError
from bundlestrap.extract import ArchiveExtractor
from bundlestrap.fetch import ArchiveFetcher
from bundlestrap.models import BootstrapConfig, ChildProcessHandle
from bundlestrap.overlay import ConfigOverlay
from bundlestrap.staging import StagingStore
from bundlestrap.supervisor import ProcessSupervisor

log = logging.getLogger(__name__)


class Pipeline:
    def __init__(
        self,
        config: BootstrapConfig,
        *,
        store: StagingStore | None = None,
        fetcher: ArchiveFetcher | None = None,
        extractor: ArchiveExtractor | None = None,
        overlay: ConfigOverlay | None = None,
        supervisor: ProcessSupervisor | None = None,
    ) -> None:
        self.config = config
        self.store = store if store is not None else StagingStore(config)
        self.fetcher = fetcher if fetcher is not None else ArchiveFetcher(config)
        self.extractor = extractor if extractor is not None else ArchiveExtractor(config)
        self.overlay = overlay if overlay is not None else ConfigOverlay(config)
        self.supervisor = supervisor if supervisor is not None else ProcessSupervisor(config)

    def download_and_extract(self) -> Path:
        archive_path = self.config.archive_path
        try:
            self.store.prepare()
            downloaded = self.fetcher.fetch(self.config.download_url)
            return self.extractor.extract(downloaded, self.config.staging_dir)
        except Exception as e:
            console.fatal("Download/Extract failed", e)
            raise
        finally:
            self.store.cleanup_artifact(archive_path)

    def apply_local_settings(self) -> bool:
        return self.overlay.apply_if_present(
            self.config.local_settings, self.config.extracted_settings
        )

    def start(self, extract_dir: Path) -> ChildProcessHandle | None:
        return self.supervisor.launch(extract_dir)

    def run(self) -> ChildProcessHandle | None:
        """Run every stage and return the child handle without waiting on it.

        Raises :class:`BootstrapError` (or any unexpected error) for fatal
        failures before launch.
        Returns None when the bundle turned out not to be launchable.
        """
        extract_dir = self.download_and_extract()
        self.apply_local_settings()
        return self.start(extract_dir)


def exit_status(code: int) -> int:
    """Map a child return code to a shell-style exit status."""
    if code < 0:
        # Killed by signal N.
        return 128 - code
    return code


def run(config: BootstrapConfig, *, detach: bool = False, pipeline: Pipeline | None = None) -> int:
    """Run the pipeline and return this process's exit status.

    The child is always observed until it exits so its exit is reported.
    By default its exit status becomes ours; with ``detach`` the exit is
    only reported and 0 is returned.
    """
    pipeline = pipeline if pipeline is not None else Pipeline(config)
    try:
        handle = pipeline.run()
    except BootstrapError as e:
        console.fatal("Fatal error in main execution", e)
        return 1
    except Exception as e:
        log.debug("unexpected pre-launch failure", exc_info=True)
        console.fatal("Fatal error in main execution", e)
        return 1

    if handle is None:
        return 1
    try:
        outcome = handle.wait()
    except KeyboardInterrupt:
        # The child shares our process group and got the same SIGINT.
        log.debug("interrupted; waiting for child pid=%s", handle.pid)
        outcome = handle.wait()
    if outcome.error is not None or outcome.exit_code is None:
        return 1
    if detach:
        log.debug("child pid=%s exit status %s not propagated", handle.pid, outcome.exit_code)
        return 0
    return exit_status(outcome.exit_code)
