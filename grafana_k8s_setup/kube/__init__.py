"""kubectl-backed cluster preflight checks."""

from grafana_k8s_setup.kube.cluster import (
    REQUIRED_TOOLS,
    check_connection,
    check_dependencies,
    connection_hints,
    current_context,
    current_user,
    detect_cloud_platform,
    in_container,
    install_hints,
    missing_tools,
    platform_from_provider_id,
    running_as_root,
)

__all__ = [
    "REQUIRED_TOOLS",
    "check_connection",
    "check_dependencies",
    "connection_hints",
    "current_context",
    "current_user",
    "detect_cloud_platform",
    "in_container",
    "install_hints",
    "missing_tools",
    "platform_from_provider_id",
    "running_as_root",
]
