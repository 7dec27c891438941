"""Values-file rendering for the k8s-monitoring chart."""

from grafana_k8s_setup.render.renderer import (
    METRICS_URL,
    REQUIRED_KEYS,
    TEMPLATE_PATH,
    build_substitutions,
    render_template,
    render_values,
    values_path,
    verify_document,
    write_values_file,
    yaml_quote,
)

__all__ = [
    "METRICS_URL",
    "REQUIRED_KEYS",
    "TEMPLATE_PATH",
    "build_substitutions",
    "render_template",
    "render_values",
    "values_path",
    "verify_document",
    "write_values_file",
    "yaml_quote",
]
