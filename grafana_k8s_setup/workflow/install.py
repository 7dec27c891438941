"""Orchestrator for the monitoring installation.

Implements the per-run state machine::

    COLLECTING → CONFIRMING → RENDERING → INSTALLING → CLEANING_UP → DONE
                                                                   ↘ FAILED

1. **Collecting**: root check, resolve every config field.
2. **Confirming**: dependency + connectivity preflight, summary, gate.
3. **Rendering**: render the values document, write it ``0600``.
4. **Installing**: ``helm repo add/update`` + ``upgrade --install``.

Any :class:`~grafana_k8s_setup.errors.SetupError` jumps straight to
``FAILED``; cleanup of the values file runs on every path because the
whole run executes inside a :class:`SecretFileGuard`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional

from grafana_k8s_setup import ui
from grafana_k8s_setup.config.models import HelmRelease, MonitoringConfig
from grafana_k8s_setup.config.prompts import Prompter, TerminalPrompter
from grafana_k8s_setup.config.resolver import resolve_config
from grafana_k8s_setup.errors import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_SUCCESS,
    ClusterConnectionError,
    ConfigValidationError,
    HelmInstallError,
    MissingDependencyError,
    SetupError,
    UserCancelled,
)
from grafana_k8s_setup.helm.runner import add_repo, update_repos, upgrade_install
from grafana_k8s_setup.kube.cluster import (
    check_connection,
    check_dependencies,
    connection_hints,
    current_context,
    current_user,
    detect_cloud_platform,
    in_container,
    install_hints,
    running_as_root,
)
from grafana_k8s_setup.render.renderer import (
    render_values,
    values_path,
    write_values_file,
)
from grafana_k8s_setup.secretfile.guard import SecretFileGuard

logger = logging.getLogger(__name__)


class RunPhase(str, Enum):
    COLLECTING = "COLLECTING"
    CONFIRMING = "CONFIRMING"
    RENDERING = "RENDERING"
    INSTALLING = "INSTALLING"
    CLEANING_UP = "CLEANING_UP"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class RunState:
    """Phase history and artifacts of one run."""

    phase: RunPhase = RunPhase.COLLECTING
    history: List[RunPhase] = field(default_factory=lambda: [RunPhase.COLLECTING])
    values_file: Optional[Path] = None
    retained: bool = False

    def advance(self, phase: RunPhase) -> None:
        logger.debug("Run phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase
        self.history.append(phase)


# ---------------------------------------------------------------------------
# Confirmation gate
# ---------------------------------------------------------------------------


def confirm_action(
    message: str,
    *,
    non_interactive: bool,
    prompter: Optional[Prompter],
) -> None:
    """Require an explicit yes, or auto-confirm in non-interactive mode.

    Raises:
        UserCancelled: the operator declined.
    """
    if non_interactive:
        logger.info("Non-interactive mode: automatically confirming %r", message)
        ui.info(f"Non-interactive mode: automatically confirming '{message}'")
        return
    if prompter is None or not prompter.confirm(message, default=False):
        raise UserCancelled()


def check_root_user(*, non_interactive: bool, prompter: Optional[Prompter]) -> bool:
    """Warn about root execution and tighten the umask.  Returns ``as_root``."""
    if not running_as_root():
        ui.info(f"Running as user: {current_user()}")
        return False

    ui.warn("Running as root detected.")
    os.umask(0o077)
    if in_container():
        ui.info("Container environment detected - running as root is acceptable.")
        return True

    ui.warn("Files will be created with root ownership")
    ui.warn("kubectl operations will run as root")
    ui.info("Consider running as a regular user with kubectl access instead")
    confirm_action(
        "Do you want to continue running as root?",
        non_interactive=non_interactive,
        prompter=prompter,
    )
    return True


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------


def run_cluster_preflight(*, as_root: bool) -> str:
    """Check tools and connectivity; return the current kubectl context."""
    ui.step("Checking dependencies...")
    try:
        check_dependencies()
    except MissingDependencyError:
        ui.info("Please install them before running this installer.")
        for hint in install_hints(as_root):
            ui.info(hint)
        raise
    ui.ok("All dependencies found.")

    ui.step("Testing Kubernetes connection...")
    try:
        check_connection()
    except ClusterConnectionError:
        for hint in connection_hints(as_root):
            ui.info(hint)
        raise

    context = current_context()
    suffix = " (as root)" if as_root else ""
    ui.ok(f"Connected to Kubernetes context: {context or '(unknown)'}{suffix}")
    return context


def advise_cloud_platform(config: MonitoringConfig) -> Optional[str]:
    """Warn when the nodes' provider disagrees with ``cloud_platform``."""
    detected = detect_cloud_platform()
    if detected is None:
        return None
    ui.info(f"Detected cloud platform: {detected}")
    if detected.lower() != config.cloud_platform.lower():
        ui.warn(
            f"You specified '{config.cloud_platform}' but the cluster nodes "
            f"report '{detected}'. Keeping '{config.cloud_platform}'."
        )
    return detected


def show_summary(
    config: MonitoringConfig, *, context: str, dest: Path, as_root: bool
) -> None:
    rows = config.summary()
    rows.append(("Running as", "root" if as_root else current_user()))
    rows.append(("Kubernetes context", context or "(unknown)"))
    rows.append(("Values file", str(dest)))
    ui.summary_table("Configuration Summary", rows)


def offer_retention(
    guard: SecretFileGuard,
    dest: Path,
    *,
    non_interactive: bool,
    prompter: Optional[Prompter],
    as_root: bool,
) -> bool:
    """Ask whether to delete the values file.  Returns ``True`` if retained."""
    if non_interactive or prompter is None:
        ui.info("Non-interactive mode: deleting generated values file.")
        return False
    try:
        delete = prompter.confirm(
            "Do you want to delete the values file with sensitive information?",
            default=True,
        )
    except ConfigValidationError:
        delete = True
    if delete:
        return False

    guard.retain()
    ui.warn(f"Values file retained: {dest}")
    if as_root:
        ui.warn("File is owned by root with 600 permissions.")
    ui.warn("Remember to delete it manually to protect sensitive information.")
    return True


# ---------------------------------------------------------------------------
# Full install workflow
# ---------------------------------------------------------------------------


def _execute(
    run: RunState,
    guard: SecretFileGuard,
    cli_values: Mapping[str, Optional[str]],
    *,
    non_interactive: bool,
    output_dir: Optional[Path],
    prompter: Optional[Prompter],
    release: HelmRelease,
    env: Optional[Mapping[str, str]],
) -> int:
    ui.banner("Grafana K8s Monitoring Setup")

    # -- COLLECTING -----------------------------------------------------------
    ui.phase("CONFIGURATION")
    as_root = check_root_user(non_interactive=non_interactive, prompter=prompter)
    if non_interactive:
        ui.info("Non-interactive mode: prompts are disabled.")
    else:
        ui.info("Please provide the following information:")
    config = resolve_config(
        cli_values, env=env, non_interactive=non_interactive, prompter=prompter,
    )
    dest = values_path(config, output_dir)

    # -- CONFIRMING -----------------------------------------------------------
    run.advance(RunPhase.CONFIRMING)
    ui.phase("PREFLIGHT")
    context = run_cluster_preflight(as_root=as_root)
    advise_cloud_platform(config)
    show_summary(config, context=context, dest=dest, as_root=as_root)
    confirm_action(
        "Proceed with the installation using these settings?",
        non_interactive=non_interactive,
        prompter=prompter,
    )

    # -- RENDERING ------------------------------------------------------------
    run.advance(RunPhase.RENDERING)
    ui.phase("RENDER")
    try:
        rendered = render_values(config)
    except ValueError as exc:
        raise ConfigValidationError(f"Values rendering failed: {exc}") from exc
    guard.track(dest)
    run.values_file = dest
    try:
        write_values_file(dest, rendered)
    except OSError as exc:
        raise SetupError(f"Cannot write values file {dest}: {exc}") from exc
    ui.ok(f"Values file created with owner-only permissions: {dest.name}")

    # -- INSTALLING -----------------------------------------------------------
    run.advance(RunPhase.INSTALLING)
    ui.phase("INSTALL")
    ui.step("Adding Grafana Helm repository...")
    add_repo(release)
    ui.ok("Grafana Helm repo added.")

    ui.step("Updating Helm repositories...")
    update_repos()
    ui.ok("Helm repositories updated.")

    ui.step("Installing Grafana K8s monitoring...")
    ui.warn("This may take a few minutes...")
    result = upgrade_install(dest, release)
    ui.command_output(result.stdout)
    ui.ok("Grafana K8s monitoring installed successfully!")

    run.retained = offer_retention(
        guard, dest,
        non_interactive=non_interactive, prompter=prompter, as_root=as_root,
    )

    ui.success_panel(
        "Installation completed successfully!",
        "Check the status with:\n"
        f"  kubectl get pods -n {release.namespace}\n"
        f"  helm status {release.release} -n {release.namespace}",
    )
    return EXIT_SUCCESS


def run_install_workflow(
    cli_values: Optional[Mapping[str, Optional[str]]] = None,
    *,
    non_interactive: bool = False,
    output_dir: Optional[Path] = None,
    prompter: Optional[Prompter] = None,
    release: Optional[HelmRelease] = None,
    env: Optional[Mapping[str, str]] = None,
    state: Optional[RunState] = None,
) -> int:
    """End-to-end install: collect → confirm → render → install → cleanup.

    Returns an exit code: 0 on success or a declined confirmation,
    1 on any failure, 130 when interrupted.
    """
    run = state if state is not None else RunState()
    release = release or HelmRelease()
    owned_prompter: Optional[TerminalPrompter] = None
    if prompter is None and not non_interactive:
        owned_prompter = TerminalPrompter()
        prompter = owned_prompter

    exit_code = EXIT_FAILURE
    final = RunPhase.FAILED

    with SecretFileGuard() as guard:
        try:
            exit_code = _execute(
                run, guard, cli_values or {},
                non_interactive=non_interactive,
                output_dir=output_dir,
                prompter=prompter,
                release=release,
                env=env,
            )
            final = RunPhase.DONE
        except UserCancelled as exc:
            ui.info(str(exc))
            exit_code = exc.exit_code
            final = RunPhase.DONE
        except HelmInstallError as exc:
            ui.error_msg(str(exc))
            ui.command_output(exc.output)
            ui.info("Check the Helm output above for details.")
            exit_code = exc.exit_code
        except SetupError as exc:
            ui.error_msg(str(exc))
            exit_code = exc.exit_code
        except KeyboardInterrupt:
            ui.error_msg("Interrupted.")
            exit_code = EXIT_INTERRUPTED
        finally:
            run.advance(RunPhase.CLEANING_UP)
            guard.cleanup()
            if owned_prompter is not None:
                owned_prompter.close()

    run.advance(final)
    if final is RunPhase.FAILED:
        logger.error("Installation failed (exit %d).", exit_code)
    return exit_code


# ---------------------------------------------------------------------------
# Preflight-only workflow
# ---------------------------------------------------------------------------


def run_preflight_only() -> int:
    """Dependency + connectivity checks with no prompts and no mutation."""
    ui.phase("PREFLIGHT")
    try:
        run_cluster_preflight(as_root=running_as_root())
    except SetupError as exc:
        ui.error_msg(str(exc))
        return exc.exit_code

    detected = detect_cloud_platform()
    if detected:
        ui.info(f"Detected cloud platform: {detected}")
    ui.ok("Preflight passed.")
    return EXIT_SUCCESS
