"""Grafana K8s Monitoring setup.

Collects deployment parameters, renders the Helm values file for
``grafana/k8s-monitoring`` and runs ``helm upgrade --install``, deleting
the credential-bearing values file on every exit path.
"""

try:
    from importlib.metadata import version

    __version__ = version("grafana-k8s-setup")
except Exception:
    __version__ = "0.0.0.dev0"

__all__ = ["__version__"]
