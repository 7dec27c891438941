"""CLI entry point for grafana-k8s-setup, built on cli-core-yo.

Provides ``install`` and ``preflight`` commands for deploying the
``grafana/k8s-monitoring`` Helm chart.  The commands live in
:mod:`grafana_k8s_setup.commands` and are loaded as a plugin.

Usage::

    grafana-k8s-setup --help
    grafana-k8s-setup install
    grafana-k8s-setup install --non-interactive --cluster-name demo-1 \\
        --customer-id W111 --project-id p1 --username 12345 --password tok
    grafana-k8s-setup --debug preflight
"""

from __future__ import annotations

import sys
from typing import List, Optional

from cli_core_yo.app import create_app
from cli_core_yo.spec import CliSpec, OutputSpec, PluginSpec, PolicySpec, XdgSpec

# ── App specification ────────────────────────────────────────────────────────

spec = CliSpec(
    prog_name="grafana-k8s-setup",
    app_display_name="Grafana K8s Monitoring Setup",
    dist_name="grafana-k8s-setup",
    root_help=(
        "Collect deployment parameters, render the Helm values file and "
        "install the grafana/k8s-monitoring chart."
    ),
    xdg=XdgSpec(app_dir_name="grafana-k8s-setup"),
    policy=PolicySpec(),
    # the commands print human-readable output only
    output=OutputSpec(support_json=False),
    plugins=PluginSpec(explicit=["grafana_k8s_setup.commands.register"]),
)

app = create_app(spec)


# ── Entry point ──────────────────────────────────────────────────────────────


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return an exit code."""
    try:
        app(args=argv)
        return 0
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0


if __name__ == "__main__":
    sys.exit(main())
