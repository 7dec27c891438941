"""Interactive input from the controlling terminal.

The installer is meant to be runnable as ``curl -sSL <url> | python -``,
in which case standard input is the script itself.  Prompts therefore
read from ``/dev/tty`` whenever stdin is not a terminal.  Hidden input
goes through :func:`getpass.getpass` (via ``Console.input(password=True)``),
which opens the controlling terminal on its own.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Protocol

from rich.console import Console

from grafana_k8s_setup import ui
from grafana_k8s_setup.config.models import ConfigField
from grafana_k8s_setup.errors import ConfigValidationError

logger = logging.getLogger(__name__)

TTY_PATH = "/dev/tty"


class Prompter(Protocol):
    """What the resolver and workflow need from an interactive session."""

    def ask(self, field: ConfigField) -> str: ...

    def confirm(self, message: str, *, default: bool = False) -> bool: ...


class TerminalPrompter:
    """Read answers from the operator's terminal.

    *stream* overrides the input source for non-hidden prompts; when it
    is ``None`` the prompter uses stdin if it is a TTY and ``/dev/tty``
    otherwise.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        *,
        stream: Optional[IO[str]] = None,
        tty_path: str = TTY_PATH,
    ) -> None:
        self.console = console or ui.console
        self._stream = stream
        self._tty_path = tty_path
        self._tty: Optional[IO[str]] = None
        self._resolved = stream is not None

    # -- input source -----------------------------------------------------

    def _input_stream(self) -> Optional[IO[str]]:
        if self._resolved:
            return self._stream
        self._resolved = True
        if sys.stdin is not None and sys.stdin.isatty():
            return None
        try:
            self._tty = open(self._tty_path, "r", encoding="utf-8")
        except OSError as exc:
            raise ConfigValidationError(
                "No terminal available for interactive input. "
                "Re-run with --non-interactive and supply every value "
                "via flags or environment variables."
            ) from exc
        logger.debug("stdin is not a TTY; reading prompts from %s", self._tty_path)
        self._stream = self._tty
        return self._stream

    def _read(self, prompt: str, *, password: bool = False) -> str:
        stream = None if password else self._input_stream()
        try:
            raw = self.console.input(prompt, password=password, stream=stream)
        except EOFError as exc:
            raise ConfigValidationError("Input closed while prompting.") from exc
        if stream is not None and raw == "":
            # readline() returns "" only at end of stream
            raise ConfigValidationError("Input closed while prompting.")
        if password:
            # secrets are taken verbatim, as from --password or PASSWORD
            return raw.rstrip("\r\n")
        return raw.strip()

    # -- Prompter ---------------------------------------------------------

    def ask(self, field: ConfigField) -> str:
        """Prompt once for *field*; answers are stripped unless the field is sensitive.

        An empty answer becomes the field's default when it has one.
        """
        label = field.prompt
        if field.default:
            label = f"{label} \\[{field.default}]"
        answer = self._read(f"{label}: ", password=field.sensitive)
        if not answer and field.default:
            return field.default
        return answer

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Yes/no question; a ``y``/``n`` prefix decides, anything else is *default*."""
        hint = "Y/n" if default else "y/N"
        answer = self._read(f"{message} ({hint}): ")
        if answer[:1] in ("y", "Y"):
            return True
        if answer[:1] in ("n", "N"):
            return False
        return default

    def close(self) -> None:
        if self._tty is not None:
            self._tty.close()
            self._tty = None
