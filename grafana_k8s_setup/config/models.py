"""Pydantic models for installer configuration.

Defines the data structures for:
- Static field definitions (:class:`ConfigField`) and the field catalogue
- Per-field resolved values and where they came from
- The assembled :class:`MonitoringConfig` handed to the renderer
- The fixed Helm release target
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, SecretStr

HIDDEN = "[HIDDEN]"


class ValueSource(str, Enum):
    """Where a resolved value came from."""

    CLI = "cli"
    ENV = "env"
    PROMPT = "prompt"
    DEFAULT = "default"


class ConfigField(BaseModel):
    """A single named, validated configuration input.

    ``pattern`` must match the whole value (:func:`re.fullmatch`).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    prompt: str
    pattern: str
    default: Optional[str] = None
    sensitive: bool = False

    @property
    def flag(self) -> str:
        """CLI flag, e.g. ``--cluster-name``."""
        return "--" + self.name.replace("_", "-")

    @property
    def env_var(self) -> str:
        """Environment variable fallback, e.g. ``CLUSTER_NAME``."""
        return self.name.upper()

    @property
    def required(self) -> bool:
        """True when the field has no default and must be supplied."""
        return not self.default

    def matches(self, value: str) -> bool:
        return re.fullmatch(self.pattern, value) is not None


class ConfigValue(BaseModel):
    """Resolved value for one field."""

    model_config = ConfigDict(frozen=True)

    field: ConfigField
    value: SecretStr
    source: ValueSource

    def display(self) -> str:
        """Value as it may appear on screen or in logs."""
        if self.field.sensitive:
            return HIDDEN
        return self.value.get_secret_value()


# ---------------------------------------------------------------------------
# Field catalogue, in prompt order.
# ---------------------------------------------------------------------------

CONFIG_FIELDS: Tuple[ConfigField, ...] = (
    ConfigField(name="cluster_name", prompt="Cluster name", pattern=r"[a-zA-Z0-9-]+"),
    ConfigField(name="customer_id", prompt="Customer ID", pattern=r"[a-zA-Z0-9]+"),
    ConfigField(name="region", prompt="Region", pattern=r"[a-z0-9-]+", default="us-east-1"),
    ConfigField(name="project_id", prompt="Project ID", pattern=r"[a-zA-Z0-9-]+"),
    ConfigField(
        name="cloud_platform", prompt="Cloud platform", pattern=r"[a-zA-Z0-9_-]+", default="AWS",
    ),
    ConfigField(name="stage", prompt="Stage", pattern=r"[a-zA-Z0-9-]+", default="preprod"),
    ConfigField(name="env_type", prompt="Environment type", pattern=r"[a-zA-Z0-9-]+", default="prod"),
    ConfigField(name="username", prompt="Grafana username", pattern=r"[0-9]+"),
    ConfigField(
        name="password", prompt="Grafana password/token", pattern=r".+", sensitive=True,
    ),
)

FIELDS_BY_NAME: Dict[str, ConfigField] = {f.name: f for f in CONFIG_FIELDS}


class MonitoringConfig(BaseModel):
    """Validated values for one installation run.

    Built by :func:`grafana_k8s_setup.config.resolver.resolve_config`;
    every attribute name matches a :data:`CONFIG_FIELDS` entry.
    """

    model_config = ConfigDict(frozen=True)

    cluster_name: str
    customer_id: str
    region: str
    project_id: str
    cloud_platform: str
    stage: str
    env_type: str
    username: str
    password: SecretStr
    sources: Dict[str, ValueSource] = Field(default_factory=dict)

    @classmethod
    def from_values(cls, values: Dict[str, ConfigValue]) -> "MonitoringConfig":
        """Assemble from resolved values keyed by field name."""
        data: Dict[str, object] = {}
        for name, cv in values.items():
            data[name] = cv.value if cv.field.sensitive else cv.value.get_secret_value()
        data["sources"] = {name: cv.source for name, cv in values.items()}
        return cls.model_validate(data)

    def value_of(self, name: str) -> str:
        """Plain value of *name*, secrets included."""
        raw = getattr(self, name)
        if isinstance(raw, SecretStr):
            return raw.get_secret_value()
        return raw

    def summary(self) -> list[tuple[str, str]]:
        """``(prompt, display value)`` pairs with secrets masked."""
        rows = []
        for f in CONFIG_FIELDS:
            rows.append((f.prompt, HIDDEN if f.sensitive else self.value_of(f.name)))
        return rows

    @property
    def values_filename(self) -> str:
        return f"values-{self.cluster_name}.yaml"


class HelmRelease(BaseModel):
    """Fixed deployment target for ``helm upgrade --install``."""

    model_config = ConfigDict(frozen=True)

    repo_name: str = "grafana"
    repo_url: str = "https://grafana.github.io/helm-charts"
    chart: str = "grafana/k8s-monitoring"
    release: str = "grafana-k8s-monitoring"
    namespace: str = "grafana-agent"
    timeout_seconds: int = 300

    @property
    def timeout(self) -> str:
        return f"{self.timeout_seconds}s"
