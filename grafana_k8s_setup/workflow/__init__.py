"""Orchestration workflows (install, preflight)."""

from grafana_k8s_setup.errors import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from grafana_k8s_setup.workflow.install import (
    RunPhase,
    RunState,
    confirm_action,
    run_install_workflow,
    run_preflight_only,
)

__all__ = [
    "EXIT_FAILURE",
    "EXIT_INTERRUPTED",
    "EXIT_SUCCESS",
    "RunPhase",
    "RunState",
    "confirm_action",
    "run_install_workflow",
    "run_preflight_only",
]
