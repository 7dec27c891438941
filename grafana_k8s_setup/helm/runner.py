"""Helm CLI wrapper: repository setup + ``upgrade --install``.

Wraps ``helm`` as a subprocess so the installer never reimplements chart
logic.  Each step either succeeds or raises
:class:`~grafana_k8s_setup.errors.HelmInstallError` carrying helm's
output; nothing is retried.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from grafana_k8s_setup.config.models import HelmRelease
from grafana_k8s_setup.errors import HelmInstallError
from grafana_k8s_setup.process import CommandResult, run_command

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Bound for ``repo add`` / ``repo update``.
REPO_TIMEOUT_SECONDS = 120

#: Extra wait beyond helm's own ``--timeout`` so ``--atomic`` can roll back.
INSTALL_GRACE_SECONDS = 120


# ---------------------------------------------------------------------------
# Internal helper
# ---------------------------------------------------------------------------


def _run_helm(args: List[str], *, timeout: float, what: str) -> CommandResult:
    result = run_command(["helm", *args], timeout=timeout)
    if result.success:
        logger.info("%s succeeded", what)
        return result

    if result.timed_out:
        reason = f"timed out after {timeout:.0f}s"
    else:
        reason = f"exit code {result.returncode}"
    logger.error(
        "%s failed (%s): %s | stdout: %s",
        what,
        reason,
        result.stderr or "(no stderr)",
        result.stdout or "(no output)",
    )
    raise HelmInstallError(f"{what} failed ({reason}).", output=result.combined_output)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def add_repo(release: Optional[HelmRelease] = None) -> CommandResult:
    """``helm repo add <name> <url> --force-update``."""
    release = release or HelmRelease()
    return _run_helm(
        ["repo", "add", release.repo_name, release.repo_url, "--force-update"],
        timeout=REPO_TIMEOUT_SECONDS,
        what=f"Adding Helm repository '{release.repo_name}'",
    )


def update_repos() -> CommandResult:
    """``helm repo update``."""
    return _run_helm(
        ["repo", "update"],
        timeout=REPO_TIMEOUT_SECONDS,
        what="Updating Helm repositories",
    )


def upgrade_install_args(values_file: Path, release: HelmRelease) -> List[str]:
    """Argument list for the idempotent, atomic install."""
    return [
        "upgrade", "--install",
        "--atomic",
        "--timeout", release.timeout,
        release.release, release.chart,
        "--namespace", release.namespace,
        "--create-namespace",
        "--values", str(values_file),
    ]


def upgrade_install(
    values_file: Path, release: Optional[HelmRelease] = None
) -> CommandResult:
    """Run ``helm upgrade --install --atomic`` with *values_file*.

    The subprocess wait is bounded by the release timeout plus
    :data:`INSTALL_GRACE_SECONDS`.
    """
    release = release or HelmRelease()
    return _run_helm(
        upgrade_install_args(values_file, release),
        timeout=release.timeout_seconds + INSTALL_GRACE_SECONDS,
        what=f"Installing {release.chart} as '{release.release}'",
    )
