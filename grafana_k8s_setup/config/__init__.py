"""Configuration fields, value resolution, and terminal prompting."""

from grafana_k8s_setup.config.models import (
    CONFIG_FIELDS,
    FIELDS_BY_NAME,
    HIDDEN,
    ConfigField,
    ConfigValue,
    HelmRelease,
    MonitoringConfig,
    ValueSource,
)
from grafana_k8s_setup.config.prompts import Prompter, TerminalPrompter
from grafana_k8s_setup.config.resolver import resolve_config, resolve_field

__all__ = [
    "CONFIG_FIELDS",
    "FIELDS_BY_NAME",
    "HIDDEN",
    "ConfigField",
    "ConfigValue",
    "HelmRelease",
    "MonitoringConfig",
    "Prompter",
    "TerminalPrompter",
    "ValueSource",
    "resolve_config",
    "resolve_field",
]
