"""Scoped lifecycle of the generated values file."""

from grafana_k8s_setup.secretfile.guard import (
    GUARDED_SIGNALS,
    SecretFileGuard,
    secure_delete,
)

__all__ = ["GUARDED_SIGNALS", "SecretFileGuard", "secure_delete"]
