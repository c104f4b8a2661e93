"""Launch and observe the bundle's entry point."""

import logging
import os
import subprocess
from pathlib import Path

from bundlestrap import console
from bundlestrap.errors import PreconditionError, SpawnError
from bundlestrap.models import BootstrapConfig, ChildProcessHandle

log = logging.getLogger(__name__)


class ProcessSupervisor:
    """Spawn the bundle's entry point with inherited stdio.

    The child is started once and never restarted. :meth:`launch` returns as
    soon as the process exists; termination is observed through the returned
    handle.
    """

    def __init__(self, config: BootstrapConfig) -> None:
        self._config = config

    def build_argv(self) -> list[str]:
        return [*self._config.runner, self._config.entry_point]

    def build_env(self) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self._config.env_override_map)
        return env

    def check_preconditions(self, extract_dir: Path) -> Path:
        """Return the entry-point path, or raise if the bundle is not launchable."""
        if not extract_dir.is_dir():
            raise PreconditionError(
                f"Extracted directory not found: {extract_dir}. Cannot start application."
            )
        entry = extract_dir / self._config.entry_point
        if not entry.is_file():
            raise PreconditionError(
                f"{self._config.entry_point} not found in extracted directory {extract_dir}."
            )
        return entry

    def launch(self, extract_dir: Path | None = None) -> ChildProcessHandle | None:
        """Start the application; return None without spawning if it cannot run."""
        console.info("Starting application...")
        cwd = Path(extract_dir) if extract_dir is not None else self._config.extract_dir
        try:
            self.check_preconditions(cwd)
        except PreconditionError as e:
            console.fatal(str(e))
            return None

        argv = self.build_argv()
        handle = ChildProcessHandle(argv, on_exit=self._report_exit, on_error=self._report_error)
        log.debug("spawning %s in %s", argv, cwd)
        try:
            process = subprocess.Popen(
                argv,
                cwd=cwd,
                env=self.build_env(),
                stdin=None,
                stdout=None,
                stderr=None,
            )
        except OSError as e:
            error = SpawnError(f"{argv[0]}: {e}")
            error.__cause__ = e
            handle.fail(error)
            return handle
        handle.attach(process)
        return handle

    def _report_exit(self, code: int) -> None:
        if code == 0:
            console.info("Application exited with code 0.")
        else:
            console.warn(f"Application terminated with exit code: {code}")

    def _report_error(self, error: SpawnError) -> None:
        console.fatal("Application failed to start", error)
