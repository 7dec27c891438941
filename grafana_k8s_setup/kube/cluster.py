"""Cluster preflight: required tools, connectivity, context, cloud detection.

Wraps ``kubectl`` as a subprocess; nothing here talks to the Kubernetes
API directly.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from grafana_k8s_setup.errors import ClusterConnectionError, MissingDependencyError
from grafana_k8s_setup.process import CommandResult, run_command

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

REQUIRED_TOOLS: tuple[str, ...] = ("kubectl", "helm")

KUBECTL_TIMEOUT_SECONDS = 30

#: ``spec.providerID`` prefix → cloud platform name.
PROVIDER_PREFIXES: tuple[tuple[str, str], ...] = (
    ("azure://", "Azure"),
    ("aws://", "AWS"),
    ("gce://", "GCP"),
)


def _kubectl(args: Sequence[str]) -> CommandResult:
    return run_command(["kubectl", *args], timeout=KUBECTL_TIMEOUT_SECONDS)


# ---------------------------------------------------------------------------
# Toolchain
# ---------------------------------------------------------------------------


def missing_tools(tools: Sequence[str] = REQUIRED_TOOLS) -> List[str]:
    """Return the subset of *tools* not found on ``PATH``."""
    return [t for t in tools if shutil.which(t) is None]


def check_dependencies(tools: Sequence[str] = REQUIRED_TOOLS) -> None:
    """Raise :class:`MissingDependencyError` listing every absent tool."""
    missing = missing_tools(tools)
    if missing:
        raise MissingDependencyError(missing)
    logger.info("Found required tools: %s", ", ".join(tools))


def install_hints(as_root: bool) -> List[str]:
    """Operator hints for installing missing tools."""
    if as_root:
        return [
            "Ubuntu/Debian: apt-get update && apt-get install -y kubectl",
            "RHEL/CentOS: yum install -y kubectl",
            "Or download directly from Kubernetes releases",
        ]
    return [
        "Use your package manager (may require sudo)",
        "Download binaries to ~/bin or another PATH directory",
        "Use installation tools like brew, snap, or direct downloads",
    ]


# ---------------------------------------------------------------------------
# Connectivity / context
# ---------------------------------------------------------------------------


def check_connection() -> None:
    """Raise :class:`ClusterConnectionError` unless ``kubectl cluster-info`` succeeds."""
    result = _kubectl(["cluster-info"])
    if not result.success:
        logger.error(
            "kubectl cluster-info failed (rc=%d): %s",
            result.returncode,
            result.stderr or "(no stderr)",
        )
        raise ClusterConnectionError("Cannot connect to Kubernetes cluster.")


def current_context() -> str:
    """Return the active kubeconfig context, or ``""`` if none is set."""
    result = _kubectl(["config", "current-context"])
    if not result.success:
        logger.warning("No current kubectl context: %s", result.stderr)
        return ""
    return result.stdout


def connection_hints(as_root: bool) -> List[str]:
    if as_root:
        return [
            "Copy kubeconfig to /root/.kube/config",
            "Set KUBECONFIG environment variable",
            "Ensure cluster certificates are accessible",
        ]
    return [
        "Ensure kubectl is configured correctly for your user",
        "Check: kubectl config view",
    ]


# ---------------------------------------------------------------------------
# Cloud platform detection (advisory)
# ---------------------------------------------------------------------------


def platform_from_provider_id(provider_id: str) -> Optional[str]:
    """Map a node ``spec.providerID`` to ``AWS`` / ``Azure`` / ``GCP``."""
    for prefix, platform in PROVIDER_PREFIXES:
        if provider_id.startswith(prefix):
            return platform
    return None


def detect_cloud_platform() -> Optional[str]:
    """Best-effort platform detection from the first node's providerID."""
    result = _kubectl(
        ["get", "nodes", "-o", "jsonpath={.items[0].spec.providerID}"]
    )
    if not result.success or not result.stdout:
        logger.debug("Cloud platform detection unavailable: %s", result.stderr)
        return None
    return platform_from_provider_id(result.stdout)


# ---------------------------------------------------------------------------
# Execution environment
# ---------------------------------------------------------------------------


def running_as_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def in_container() -> bool:
    """True inside Docker or a Kubernetes pod."""
    return Path("/.dockerenv").exists() or bool(
        os.environ.get("KUBERNETES_SERVICE_HOST")
    )


def current_user() -> str:
    if running_as_root():
        return "root"
    for var in ("USER", "LOGNAME"):
        if os.environ.get(var):
            return os.environ[var]
    try:
        import pwd

        return pwd.getpwuid(os.getuid()).pw_name
    except (ImportError, KeyError):
        return "unknown"
