"""Helm repository setup and chart installation."""

from grafana_k8s_setup.helm.runner import (
    INSTALL_GRACE_SECONDS,
    REPO_TIMEOUT_SECONDS,
    add_repo,
    update_repos,
    upgrade_install,
    upgrade_install_args,
)

__all__ = [
    "INSTALL_GRACE_SECONDS",
    "REPO_TIMEOUT_SECONDS",
    "add_repo",
    "update_repos",
    "upgrade_install",
    "upgrade_install_args",
]
