"""Shared test helpers."""

from __future__ import annotations

from typing import Iterable, List

import pytest

from grafana_k8s_setup.config.models import ConfigField


class ScriptedPrompter:
    """Prompter that replays canned answers and records what was asked."""

    def __init__(self, answers: Iterable[str] = (), confirms: Iterable[bool] = ()) -> None:
        self.answers: List[str] = list(answers)
        self.confirms: List[bool] = list(confirms)
        self.asked: List[str] = []
        self.confirmed: List[str] = []

    def ask(self, field: ConfigField) -> str:
        self.asked.append(field.name)
        return self.answers.pop(0)

    def confirm(self, message: str, *, default: bool = False) -> bool:
        self.confirmed.append(message)
        if self.confirms:
            return self.confirms.pop(0)
        return default


VALID_CLI = {
    "cluster_name": "demo-1",
    "customer_id": "W111",
    "project_id": "p1",
    "username": "12345",
    "password": "tok",
}


@pytest.fixture
def valid_cli() -> dict:
    return dict(VALID_CLI)


@pytest.fixture
def scripted():
    """Factory: ``scripted(answers=[...], confirms=[...])``."""
    return ScriptedPrompter
