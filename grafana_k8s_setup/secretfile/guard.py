"""Lifecycle guard for the credential-bearing values file.

:class:`SecretFileGuard` is entered at the start of a run, before any
value is collected.  From then on the tracked file is removed however
the process leaves the ``with`` block: normal return, exception,
``KeyboardInterrupt``, or ``SIGTERM``/``SIGHUP`` (translated into
:class:`~grafana_k8s_setup.errors.RunInterrupted`).  An ``atexit`` hook
covers interpreter shutdown paths that bypass the block.

Removal prefers ``shred`` and falls back to ``unlink``.
"""

from __future__ import annotations

import atexit
import logging
import shutil
import signal
import subprocess
from pathlib import Path
from types import FrameType
from typing import Any, Dict, Optional

from grafana_k8s_setup import ui
from grafana_k8s_setup.errors import RunInterrupted

logger = logging.getLogger(__name__)

SHRED_CMD = "shred"
SHRED_ARGS = ["-f", "-z", "-n", "3", "-u"]
SHRED_TIMEOUT_SECONDS = 60

#: Signals that should still run cleanup.  SIGINT already surfaces as
#: KeyboardInterrupt and is left alone.
GUARDED_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None))
    if sig is not None
)


def secure_delete(path: Path) -> bool:
    """Overwrite-and-remove *path* when ``shred`` exists, else unlink it.

    Returns ``True`` if a file was removed.
    """
    path = Path(path)
    if not path.exists():
        return False

    shred = shutil.which(SHRED_CMD)
    if shred:
        logger.info("Securely deleting %s with shred", path)
        try:
            proc = subprocess.run(
                [shred, *SHRED_ARGS, str(path)],
                capture_output=True,
                text=True,
                timeout=SHRED_TIMEOUT_SECONDS,
            )
            if proc.returncode != 0:
                logger.warning(
                    "shred exited %d: %s", proc.returncode, proc.stderr.strip()
                )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.warning("shred failed (%s); falling back to unlink", exc)
    else:
        logger.info("Deleting %s", path)

    # shred -u may be missing on some platforms or fail part way
    path.unlink(missing_ok=True)
    return True


class SecretFileGuard:
    """Context manager guaranteeing deletion of the tracked secret file.

    Usage::

        with SecretFileGuard() as guard:
            guard.track(path)
            write_values_file(path, text)
            ...
            if operator_wants_to_keep_it:
                guard.retain()
    """

    def __init__(self, path: Optional[Path] = None, *, install_signal_handlers: bool = True) -> None:
        self.path: Optional[Path] = Path(path) if path is not None else None
        self.retained = False
        self.cleaned = False
        self._install_signal_handlers = install_signal_handlers
        self._previous_handlers: Dict[int, Any] = {}
        self._active = False

    # -- tracking -----------------------------------------------------------

    def track(self, path: Path) -> Path:
        """Start guarding *path*.  Call before the file is written."""
        self.path = Path(path)
        self.retained = False
        self.cleaned = False
        logger.debug("Guarding secret file %s", self.path)
        return self.path

    def retain(self) -> None:
        """Operator opt-out: keep the file when the guard exits."""
        self.retained = True
        logger.info("Secret file %s will be retained", self.path)

    # -- cleanup ------------------------------------------------------------

    def cleanup(self) -> bool:
        """Remove the tracked file unless retained.  Safe to call repeatedly.

        Returns ``True`` if a file was deleted by this call.
        """
        if self.cleaned or self.path is None:
            return False
        if self.retained or not self.path.exists():
            self.cleaned = True
            return False
        ui.step("Removing values file with sensitive information...")
        removed = secure_delete(self.path)
        # only after deletion, so an interrupted attempt is retried on exit
        self.cleaned = True
        if removed:
            ui.ok(f"Values file deleted: {self.path.name}")
        return removed

    def _handle_signal(self, signum: int, frame: Optional[FrameType]) -> None:
        logger.warning("Received signal %d; cleaning up", signum)
        raise RunInterrupted(signum)

    def _atexit(self) -> None:
        if self._active:
            self.cleanup()

    # -- context manager ----------------------------------------------------

    def __enter__(self) -> "SecretFileGuard":
        self._active = True
        atexit.register(self._atexit)
        if self._install_signal_handlers:
            for sig in GUARDED_SIGNALS:
                try:
                    self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)
                except ValueError:
                    # not in the main thread
                    logger.debug("Cannot install handler for signal %d", sig)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.cleanup()
        finally:
            for sig, handler in self._previous_handlers.items():
                signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
            self._previous_handlers.clear()
            atexit.unregister(self._atexit)
            self._active = False
