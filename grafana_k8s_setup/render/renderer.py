"""Helm values renderer: replaces ``${KEY}`` tokens in a YAML template.

It performs **text-level** token replacement so the template's key
ordering and comments are preserved byte-for-byte across runs.  Every
substituted value is written as a double-quoted YAML scalar, then the
result is parsed back to make sure no value broke the document.

The written file holds the Grafana credentials, so it is created with
mode ``0600`` and moved into place atomically.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

import yaml

from grafana_k8s_setup.config.models import CONFIG_FIELDS, MonitoringConfig

logger = logging.getLogger(__name__)

# ── constants ────────────────────────────────────────────────────────

TEMPLATE_PATH: Path = Path(__file__).parent / "templates" / "k8s-monitoring-values.yaml"

#: Grafana Cloud Prometheus remote-write endpoint.
METRICS_URL: str = "https://prometheus-prod-10-prod-us-central-0.grafana.net/api/prom/push"

#: One token per config field plus the destination URL.
REQUIRED_KEYS: FrozenSet[str] = frozenset(
    {f.env_var for f in CONFIG_FIELDS} | {"METRICS_URL"}
)

VALUES_FILE_MODE = 0o600

_TOKEN_RE = re.compile(r"\$\{([A-Z][A-Z0-9_]*)\}")


# ── public API ───────────────────────────────────────────────────────


def yaml_quote(value: str) -> str:
    """Return *value* as a double-quoted YAML scalar on a single line.

    Control characters are escaped; other Unicode is written as-is.
    """
    text = yaml.safe_dump(
        value, default_style='"', width=float("inf"), allow_unicode=True,
    )
    return text.removesuffix("\n...\n").rstrip("\n")


def load_template(path: Optional[Path] = None) -> str:
    """Read the bundled values template (or *path*)."""
    return (path or TEMPLATE_PATH).read_text(encoding="utf-8")


def build_substitutions(config: MonitoringConfig) -> Dict[str, str]:
    """Map template keys to raw (unquoted) values for *config*."""
    subs = {f.env_var: config.value_of(f.name) for f in CONFIG_FIELDS}
    subs["METRICS_URL"] = METRICS_URL
    return subs


def render_template(
    template_text: str,
    substitutions: Dict[str, str],
    *,
    required_keys: Optional[FrozenSet[str]] = None,
) -> str:
    """Replace all ``${KEY}`` tokens in *template_text* with quoted values.

    Parameters
    ----------
    template_text:
        Raw template content.
    substitutions:
        Mapping of key → raw value (e.g. ``{"CLUSTER_NAME": "demo-1"}``).
    required_keys:
        Keys that **must** be present with a non-empty value.
        Defaults to :data:`REQUIRED_KEYS`.

    Raises
    ------
    ValueError
        If a required key is missing or empty, or a token in the
        template has no substitution.
    """
    if required_keys is None:
        required_keys = REQUIRED_KEYS

    missing: List[str] = sorted(
        k for k in required_keys if not substitutions.get(k)
    )
    if missing:
        raise ValueError(
            f"Missing required substitution key(s): {', '.join(missing)}"
        )

    unknown = sorted(set(_TOKEN_RE.findall(template_text)) - set(substitutions))
    if unknown:
        raise ValueError(
            f"Template token(s) without a substitution: {', '.join(unknown)}"
        )

    # single pass, so a value that itself contains ``${...}`` is left alone
    return _TOKEN_RE.sub(
        lambda m: yaml_quote(substitutions[m.group(1)]), template_text
    )


def _scalars(node: Any) -> List[str]:
    if isinstance(node, dict):
        return [s for v in node.values() for s in _scalars(v)]
    if isinstance(node, list):
        return [s for v in node for s in _scalars(v)]
    return [str(node)] if node is not None else []


def verify_document(rendered: str, substitutions: Dict[str, str]) -> None:
    """Parse *rendered* and check every substituted value survived intact.

    Raises:
        ValueError: the text is not a YAML mapping, or a value was split
            or mangled by the YAML parser.
    """
    try:
        doc = yaml.safe_load(rendered)
    except yaml.YAMLError as exc:
        raise ValueError(f"Rendered values are not valid YAML: {exc}") from exc
    if not isinstance(doc, dict):
        raise ValueError("Rendered values must be a YAML mapping")

    leaves = set(_scalars(doc))
    broken = sorted(k for k, v in substitutions.items() if v not in leaves)
    if broken:
        raise ValueError(
            f"Value(s) for {', '.join(broken)} did not survive YAML parsing"
        )


def render_values(
    config: MonitoringConfig, *, template_text: Optional[str] = None
) -> str:
    """Render and verify the values document for *config*."""
    text = template_text if template_text is not None else load_template()
    subs = build_substitutions(config)
    rendered = render_template(text, subs)
    verify_document(rendered, subs)
    return rendered


def values_path(config: MonitoringConfig, directory: Optional[Path] = None) -> Path:
    """``<directory>/values-<cluster_name>.yaml`` (cwd by default)."""
    return Path(directory or Path.cwd()) / config.values_filename


def write_values_file(dest: Path, rendered: str) -> Path:
    """Atomically write *rendered* to *dest* with owner-only permissions.

    The temporary file is created ``0600`` with ``O_EXCL`` in the target
    directory, fsynced, then ``os.replace``d over *dest*.
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{dest.name}.", suffix=".tmp", dir=str(dest.parent)
    )
    try:
        os.fchmod(fd, VALUES_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(rendered)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, dest)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Values file written to %s (mode %o)", dest, VALUES_FILE_MODE)
    return dest
