"""Tests for grafana_k8s_setup.config.resolver.

Covers:
1. CLI flag → env var → prompt → default precedence
2. Fail-fast on invalid flag/env values (no prompt shown)
3. Non-interactive defaults and missing required fields
4. Interactive re-prompt on invalid input
"""

from __future__ import annotations

import pytest

from grafana_k8s_setup.config.models import CONFIG_FIELDS, FIELDS_BY_NAME, ValueSource
from grafana_k8s_setup.config.resolver import resolve_config, resolve_field
from grafana_k8s_setup.errors import ConfigValidationError

#: One pattern-violating value per field.
BAD_VALUES = {
    "cluster_name": "bad name",
    "customer_id": "W-111",
    "region": "EU!",
    "project_id": "p_1",
    "cloud_platform": "A W S",
    "stage": "pre prod",
    "env_type": "prod!",
    "username": "abc",
    "password": "line1\nline2",
}

REQUIRED_FIELDS = [f for f in CONFIG_FIELDS if f.required]
DEFAULTED_FIELDS = [f for f in CONFIG_FIELDS if not f.required]


# ── Precedence ───────────────────────────────────────────────────────────


class TestPrecedence:
    def test_cli_beats_env(self, scripted):
        p = scripted()
        cv = resolve_field(
            FIELDS_BY_NAME["region"], cli_value="eu-west-1",
            env={"REGION": "us-west-2"}, prompter=p,
        )
        assert cv.value.get_secret_value() == "eu-west-1"
        assert cv.source is ValueSource.CLI
        assert p.asked == []

    def test_env_used_without_cli(self, scripted):
        p = scripted()
        cv = resolve_field(
            FIELDS_BY_NAME["region"], env={"REGION": "us-west-2"}, prompter=p,
        )
        assert cv.value.get_secret_value() == "us-west-2"
        assert cv.source is ValueSource.ENV
        assert p.asked == []

    def test_empty_cli_falls_through_to_env(self):
        cv = resolve_field(
            FIELDS_BY_NAME["stage"], cli_value="", env={"STAGE": "dev"},
            non_interactive=True,
        )
        assert cv.value.get_secret_value() == "dev"

    def test_empty_env_treated_as_unset(self, scripted):
        p = scripted(answers=["W9"])
        cv = resolve_field(
            FIELDS_BY_NAME["customer_id"], env={"CUSTOMER_ID": ""}, prompter=p,
        )
        assert cv.source is ValueSource.PROMPT
        assert p.asked == ["customer_id"]

    def test_prompt_used_last(self, scripted):
        p = scripted(answers=["eu"])
        cv = resolve_field(FIELDS_BY_NAME["region"], env={}, prompter=p)
        assert cv.value.get_secret_value() == "eu"
        assert cv.source is ValueSource.PROMPT


# ── Fail-fast validation ─────────────────────────────────────────────────


class TestFailFast:
    @pytest.mark.parametrize("field", CONFIG_FIELDS, ids=lambda f: f.name)
    def test_invalid_cli_fails_without_prompt(self, field, scripted):
        p = scripted(answers=["should-not-be-used"])
        with pytest.raises(ConfigValidationError) as excinfo:
            resolve_field(field, cli_value=BAD_VALUES[field.name], env={}, prompter=p)
        assert p.asked == []
        assert excinfo.value.field_name == field.name
        assert field.env_var in str(excinfo.value)

    @pytest.mark.parametrize("field", CONFIG_FIELDS, ids=lambda f: f.name)
    def test_invalid_env_fails_without_prompt(self, field, scripted):
        p = scripted(answers=["should-not-be-used"])
        with pytest.raises(ConfigValidationError):
            resolve_field(field, env={field.env_var: BAD_VALUES[field.name]}, prompter=p)
        assert p.asked == []

    def test_invalid_cli_not_rescued_by_valid_env(self):
        with pytest.raises(ConfigValidationError):
            resolve_field(
                FIELDS_BY_NAME["region"], cli_value="EU!", env={"REGION": "eu"},
                non_interactive=True,
            )

    def test_error_does_not_echo_password(self):
        with pytest.raises(ConfigValidationError) as excinfo:
            resolve_field(
                FIELDS_BY_NAME["password"], cli_value="line1\nline2", env={},
                non_interactive=True,
            )
        assert "line1" not in str(excinfo.value)


# ── Non-interactive mode ─────────────────────────────────────────────────


class TestNonInteractive:
    @pytest.mark.parametrize("field", DEFAULTED_FIELDS, ids=lambda f: f.name)
    def test_default_applied(self, field):
        cv = resolve_field(field, env={}, non_interactive=True)
        assert cv.value.get_secret_value() == field.default
        assert cv.source is ValueSource.DEFAULT

    @pytest.mark.parametrize("field", REQUIRED_FIELDS, ids=lambda f: f.name)
    def test_required_missing_fails(self, field):
        with pytest.raises(ConfigValidationError, match="non-interactive"):
            resolve_field(field, env={}, non_interactive=True)

    def test_no_prompter_used(self, scripted):
        p = scripted(answers=["x"])
        with pytest.raises(ConfigValidationError):
            resolve_field(FIELDS_BY_NAME["username"], env={}, non_interactive=True, prompter=p)
        assert p.asked == []


# ── Interactive mode ─────────────────────────────────────────────────────


class TestInteractive:
    def test_reprompts_until_valid(self, scripted):
        p = scripted(answers=["EU!", "eu"])
        cv = resolve_field(FIELDS_BY_NAME["region"], env={}, prompter=p)
        assert cv.value.get_secret_value() == "eu"
        assert p.asked == ["region", "region"]

    def test_empty_answer_for_required_field_reprompts(self, scripted):
        p = scripted(answers=["", "", "W111"])
        cv = resolve_field(FIELDS_BY_NAME["customer_id"], env={}, prompter=p)
        assert cv.value.get_secret_value() == "W111"
        assert len(p.asked) == 3

    def test_default_answer_marked_as_default(self, scripted):
        p = scripted(answers=["us-east-1"])
        cv = resolve_field(FIELDS_BY_NAME["region"], env={}, prompter=p)
        assert cv.source is ValueSource.DEFAULT

    def test_no_prompter_fails(self):
        with pytest.raises(ConfigValidationError):
            resolve_field(FIELDS_BY_NAME["region"], env={})


# ── resolve_config ───────────────────────────────────────────────────────


class TestResolveConfig:
    def test_scenario_defaults_fill_in(self, valid_cli):
        cfg = resolve_config(valid_cli, env={}, non_interactive=True)
        assert cfg.cluster_name == "demo-1"
        assert cfg.region == "us-east-1"
        assert cfg.cloud_platform == "AWS"
        assert cfg.stage == "preprod"
        assert cfg.env_type == "prod"
        assert cfg.value_of("password") == "tok"
        assert cfg.sources["region"] is ValueSource.DEFAULT
        assert cfg.sources["cluster_name"] is ValueSource.CLI

    def test_env_fallback(self, valid_cli):
        del valid_cli["username"]
        cfg = resolve_config(valid_cli, env={"USERNAME": "999"}, non_interactive=True)
        assert cfg.username == "999"
        assert cfg.sources["username"] is ValueSource.ENV

    def test_prompts_in_field_order(self, scripted):
        p = scripted(answers=[
            "demo-1", "W111", "us-east-1", "p1", "AWS", "preprod", "prod", "12345", "tok",
        ])
        cfg = resolve_config({}, env={}, prompter=p)
        assert p.asked == [f.name for f in CONFIG_FIELDS]
        assert cfg.username == "12345"

    def test_unknown_cli_key_rejected(self):
        with pytest.raises(ValueError, match="bogus"):
            resolve_config({"bogus": "x"}, env={}, non_interactive=True)

    def test_first_invalid_value_stops_resolution(self, valid_cli, scripted):
        valid_cli["customer_id"] = "W-111"
        p = scripted()
        with pytest.raises(ConfigValidationError) as excinfo:
            resolve_config(valid_cli, env={}, prompter=p)
        assert excinfo.value.field_name == "customer_id"
        assert p.asked == []
