"""Per-field value resolution.

Resolution order for every :class:`ConfigField`:

1. explicit CLI flag
2. environment variable named after the field (``CLUSTER_NAME`` ...)
3. interactive prompt, offering the field's default
4. non-interactive mode: the field's default, otherwise fail

A flag or env value that does not match the field pattern fails
immediately; it is never silently replaced by a prompt.  Interactive
answers that do not match are re-prompted.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Mapping, Optional

from pydantic import SecretStr

from grafana_k8s_setup import ui
from grafana_k8s_setup.config.models import (
    CONFIG_FIELDS,
    ConfigField,
    ConfigValue,
    MonitoringConfig,
    ValueSource,
)
from grafana_k8s_setup.config.prompts import Prompter
from grafana_k8s_setup.errors import ConfigValidationError

logger = logging.getLogger(__name__)


def _supplied(value: Optional[str]) -> bool:
    return value is not None and value != ""


def _describe(field: ConfigField, source: ValueSource) -> str:
    origin = "command line" if source is ValueSource.CLI else "environment"
    hidden = " (hidden)" if field.sensitive else ""
    return f"Using {field.env_var} from {origin}{hidden}"


def resolve_field(
    field: ConfigField,
    *,
    cli_value: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    non_interactive: bool = False,
    prompter: Optional[Prompter] = None,
) -> ConfigValue:
    """Return the resolved value for *field*.

    Raises:
        ConfigValidationError: a flag/env value fails the pattern, or no
            value is available in non-interactive mode.
    """
    env = os.environ if env is None else env

    for source, candidate in (
        (ValueSource.CLI, cli_value),
        (ValueSource.ENV, env.get(field.env_var)),
    ):
        if not _supplied(candidate):
            continue
        if not field.matches(candidate):
            raise ConfigValidationError(
                f"Value provided for {field.env_var} ({field.flag}) does not "
                f"match expected format: {field.pattern}",
                field_name=field.name,
            )
        logger.info(_describe(field, source))
        ui.info(_describe(field, source))
        return ConfigValue(field=field, value=SecretStr(candidate), source=source)

    if non_interactive:
        if field.default:
            logger.info("Using default for %s: %s", field.env_var, field.default)
            return ConfigValue(
                field=field, value=SecretStr(field.default), source=ValueSource.DEFAULT,
            )
        raise ConfigValidationError(
            f"{field.env_var} is required in non-interactive mode. "
            f"Provide it via {field.flag} or the {field.env_var} environment variable.",
            field_name=field.name,
        )

    if prompter is None:
        raise ConfigValidationError(
            f"No value for {field.env_var} and no prompter available.",
            field_name=field.name,
        )

    while True:
        answer = prompter.ask(field)
        if field.matches(answer):
            break
        ui.fail("Invalid input. Please try again.")

    source = ValueSource.PROMPT
    if field.default and answer == field.default:
        source = ValueSource.DEFAULT
    return ConfigValue(field=field, value=SecretStr(answer), source=source)


def resolve_config(
    cli_values: Optional[Mapping[str, Optional[str]]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    non_interactive: bool = False,
    prompter: Optional[Prompter] = None,
) -> MonitoringConfig:
    """Resolve every field in :data:`CONFIG_FIELDS` order.

    *cli_values* maps field name to the flag value (``None`` when the
    flag was not given).
    """
    cli_values = cli_values or {}
    unknown = sorted(set(cli_values) - {f.name for f in CONFIG_FIELDS})
    if unknown:
        raise ValueError(f"Unknown config field(s): {', '.join(unknown)}")

    resolved: Dict[str, ConfigValue] = {}
    for field in CONFIG_FIELDS:
        resolved[field.name] = resolve_field(
            field,
            cli_value=cli_values.get(field.name),
            env=env,
            non_interactive=non_interactive,
            prompter=prompter,
        )
        logger.debug(
            "%s = %s (%s)",
            field.name,
            resolved[field.name].display(),
            resolved[field.name].source.value,
        )
    return MonitoringConfig.from_values(resolved)
