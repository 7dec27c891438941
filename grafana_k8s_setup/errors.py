"""Error taxonomy for the installer.

Every failure the workflow can report is a :class:`SetupError` carrying
the process exit code it maps to.  Library modules raise these; only
:mod:`grafana_k8s_setup.workflow.install` catches them.
"""

from __future__ import annotations

from dataclasses import dataclass

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


@dataclass
class SetupError(Exception):
    message: str
    exit_code: int = EXIT_FAILURE

    def __str__(self) -> str:
        return self.message


class MissingDependencyError(SetupError):
    """A required CLI (``kubectl``, ``helm``) is not on ``PATH``."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Missing required dependencies: {' '.join(self.missing)}"
        )


class ConfigValidationError(SetupError):
    """A configuration value is absent or does not match its pattern."""

    def __init__(self, message: str, *, field_name: str = "") -> None:
        self.field_name = field_name
        super().__init__(message)


class ClusterConnectionError(SetupError):
    """``kubectl`` cannot reach the target cluster."""


class HelmInstallError(SetupError):
    """A ``helm`` step exited non-zero, timed out, or could not start."""

    def __init__(self, message: str, *, output: str = "") -> None:
        self.output = output
        super().__init__(message)


class UserCancelled(SetupError):
    """The operator declined at a confirmation gate (clean exit)."""

    def __init__(self, message: str = "Operation cancelled.") -> None:
        super().__init__(message, EXIT_SUCCESS)


class RunInterrupted(SetupError):
    """Raised from a signal handler so scoped cleanup still runs."""

    def __init__(self, signum: int) -> None:
        self.signum = signum
        super().__init__(f"Interrupted by signal {signum}", EXIT_INTERRUPTED)
