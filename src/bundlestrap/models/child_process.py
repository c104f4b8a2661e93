"""Handle over a supervised child process."""

import logging
import subprocess
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from dataclasses import dataclass

from bundlestrap.errors import SpawnError

log = logging.getLogger(__name__)

ExitCallback = Callable[[int], None]
ErrorCallback = Callable[[SpawnError], None]


@dataclass(frozen=True)
class ChildOutcome:
    """How a child process ended: an exit code, or a spawn failure."""

    exit_code: int | None
    error: SpawnError | None = None

    @property
    def spawned(self) -> bool:
        return self.error is None


class ChildProcessHandle:
    """Owned view of one child process.

    A single watcher thread waits on the process and resolves :attr:`future`
    exactly once, then fires the exit callback. A spawn failure resolves the
    future with the error and fires the error callback instead.
    """

    def __init__(
        self,
        argv: Sequence[str],
        on_exit: ExitCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.argv = list(argv)
        self._on_exit = on_exit
        self._on_error = on_error
        self._process: subprocess.Popen | None = None
        self._watcher: threading.Thread | None = None
        self.future: Future[ChildOutcome] = Future()

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def exit_code(self) -> int | None:
        if not self.future.done():
            return None
        return self.future.result().exit_code

    @property
    def spawn_error(self) -> SpawnError | None:
        if not self.future.done():
            return None
        return self.future.result().error

    def done(self) -> bool:
        return self.future.done()

    def wait(self, timeout: float | None = None) -> ChildOutcome:
        """Block until the child exits (or failed to spawn) and return the outcome."""
        return self.future.result(timeout=timeout)

    def attach(self, process: subprocess.Popen) -> None:
        """Start observing a freshly spawned process."""
        if self._process is not None or self.future.done():
            raise RuntimeError("handle is already bound to a process")
        self._process = process
        self._watcher = threading.Thread(
            target=self._watch,
            args=(process,),
            daemon=True,
            name=f"bundlestrap-child-{process.pid}",
        )
        self._watcher.start()

    def fail(self, error: SpawnError) -> None:
        """Resolve the handle with a spawn failure."""
        if self.future.done():
            raise RuntimeError("handle is already resolved")
        try:
            if self._on_error is not None:
                self._on_error(error)
        finally:
            self.future.set_result(ChildOutcome(exit_code=None, error=error))

    def terminate(self) -> None:
        if self._process is not None and self._process.poll() is None:
            self._process.terminate()

    def _watch(self, process: subprocess.Popen) -> None:
        code = process.wait()
        log.debug("child pid=%s exited with %s", process.pid, code)
        try:
            if self._on_exit is not None:
                self._on_exit(code)
        except Exception:
            log.exception("exit callback failed for pid=%s", process.pid)
        finally:
            # Waiters wake only after the exit has been reported.
            self.future.set_result(ChildOutcome(exit_code=code))
