"""``install`` and ``preflight`` commands, registered as a cli-core-yo plugin.

The framework owns the root options (``--debug``, ``--dry-run``,
``--no-color``); the commands read them from the runtime context.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from cli_core_yo import output
from cli_core_yo.registry import CommandRegistry
from cli_core_yo.runtime import get_context
from cli_core_yo.spec import CliSpec, CommandPolicy


def _configure_logging() -> None:
    if get_context().debug:
        logging.basicConfig(level=logging.DEBUG)


# ── install command ──────────────────────────────────────────────────────────


def install(
    cluster_name: Optional[str] = typer.Option(
        None, "--cluster-name", help="Grafana Agent cluster name (CLUSTER_NAME).",
    ),
    customer_id: Optional[str] = typer.Option(
        None, "--customer-id", help="Customer identifier (CUSTOMER_ID).",
    ),
    region: Optional[str] = typer.Option(
        None, "--region", help="Deployment region (REGION). Default: us-east-1.",
    ),
    project_id: Optional[str] = typer.Option(
        None, "--project-id", help="Project identifier (PROJECT_ID).",
    ),
    cloud_platform: Optional[str] = typer.Option(
        None, "--cloud-platform", help="Cloud platform name (CLOUD_PLATFORM). Default: AWS.",
    ),
    stage: Optional[str] = typer.Option(
        None, "--stage", help="Stage identifier (STAGE). Default: preprod.",
    ),
    env_type: Optional[str] = typer.Option(
        None, "--env-type", help="Environment type (ENV_TYPE). Default: prod.",
    ),
    username: Optional[str] = typer.Option(
        None, "--username", help="Grafana username (USERNAME).",
    ),
    password: Optional[str] = typer.Option(
        None, "--password", help="Grafana password or token (PASSWORD).",
    ),
    non_interactive: bool = typer.Option(
        False,
        "--non-interactive",
        envvar="NON_INTERACTIVE",
        help=(
            "Require all configuration via flags or environment variables. "
            "Prompts are disabled; fields with defaults use them."
        ),
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        help="Directory for the temporary values file. Default: current directory.",
    ),
) -> None:
    """Install Grafana Kubernetes monitoring on the current cluster.

    Every flag maps to an environment variable of the same name; flags
    override environment variables.  The generated values file contains
    the Grafana credentials and is deleted on exit unless you choose to
    keep it after a successful interactive run.

    Exit codes: 0 = installed or cancelled, 1 = failure, 130 = interrupted.
    """
    from grafana_k8s_setup.workflow.install import run_install_workflow

    _configure_logging()

    cli_values = {
        "cluster_name": cluster_name,
        "customer_id": customer_id,
        "region": region,
        "project_id": project_id,
        "cloud_platform": cloud_platform,
        "stage": stage,
        "env_type": env_type,
        "username": username,
        "password": password,
    }

    output.action("Setting up Grafana K8s monitoring ...")
    rc = run_install_workflow(
        cli_values,
        non_interactive=non_interactive,
        output_dir=output_dir,
    )
    if rc == 0:
        output.success("Done.")
    raise typer.Exit(rc)


# ── preflight command ────────────────────────────────────────────────────────


def preflight() -> None:
    """Check kubectl/helm availability and cluster connectivity only.

    Exits 0 on success, 1 on failure.  Nothing is written or installed.
    """
    from grafana_k8s_setup.workflow.install import run_preflight_only

    _configure_logging()

    output.action("Running preflight checks ...")
    rc = run_preflight_only()
    if rc != 0:
        output.error("Preflight failed.")
    raise typer.Exit(rc)


# ── Plugin entry ─────────────────────────────────────────────────────────────


def register(registry: CommandRegistry, spec: CliSpec) -> None:
    registry.add_command(
        None,
        "install",
        install,
        help_text="Install Grafana Kubernetes monitoring on the current cluster.",
        policy=CommandPolicy(
            mutates_state=True, interactive=True, long_running=True, runtime_guard="exempt",
        ),
    )
    registry.add_command(
        None,
        "preflight",
        preflight,
        help_text="Check kubectl/helm availability and cluster connectivity only.",
        policy=CommandPolicy(runtime_guard="exempt"),
    )
