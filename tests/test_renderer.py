"""Tests for grafana_k8s_setup.render.renderer."""

from __future__ import annotations

import stat

import pytest
import yaml
from pydantic import SecretStr

from grafana_k8s_setup.config.models import CONFIG_FIELDS, MonitoringConfig
from grafana_k8s_setup.render.renderer import (
    METRICS_URL,
    REQUIRED_KEYS,
    TEMPLATE_PATH,
    build_substitutions,
    load_template,
    render_template,
    render_values,
    values_path,
    verify_document,
    write_values_file,
    yaml_quote,
)


# ── fixtures ─────────────────────────────────────────────────────────

MINI_TEMPLATE = (
    "cluster:\n"
    "  name: ${CLUSTER_NAME}\n"
    "auth:\n"
    "  password: ${PASSWORD}\n"
)


def _config(**overrides) -> MonitoringConfig:
    data = dict(
        cluster_name="demo-1",
        customer_id="W111",
        region="us-east-1",
        project_id="p1",
        cloud_platform="AWS",
        stage="preprod",
        env_type="prod",
        username="12345",
        password=SecretStr("tok"),
    )
    data.update(overrides)
    return MonitoringConfig(**data)


# ── TestConstants ────────────────────────────────────────────────────


class TestConstants:
    def test_required_keys_cover_every_field(self):
        assert REQUIRED_KEYS == {f.env_var for f in CONFIG_FIELDS} | {"METRICS_URL"}

    def test_template_ships_with_package(self):
        assert TEMPLATE_PATH.is_file()

    def test_template_has_every_token(self):
        text = load_template()
        for key in REQUIRED_KEYS:
            assert "${" + key + "}" in text


# ── TestRenderTemplate ───────────────────────────────────────────────


class TestRenderTemplate:
    def test_values_quoted(self):
        out = render_template(
            MINI_TEMPLATE,
            {"CLUSTER_NAME": "demo-1", "PASSWORD": "tok"},
            required_keys=frozenset({"CLUSTER_NAME", "PASSWORD"}),
        )
        assert out == 'cluster:\n  name: "demo-1"\nauth:\n  password: "tok"\n'

    def test_missing_required_key_raises(self):
        with pytest.raises(ValueError, match="PASSWORD"):
            render_template(
                MINI_TEMPLATE,
                {"CLUSTER_NAME": "demo-1"},
                required_keys=frozenset({"CLUSTER_NAME", "PASSWORD"}),
            )

    def test_empty_required_key_raises(self):
        with pytest.raises(ValueError, match="PASSWORD"):
            render_template(
                MINI_TEMPLATE,
                {"CLUSTER_NAME": "demo-1", "PASSWORD": ""},
                required_keys=frozenset({"CLUSTER_NAME", "PASSWORD"}),
            )

    def test_unknown_token_raises(self):
        with pytest.raises(ValueError, match="PASSWORD"):
            render_template(
                MINI_TEMPLATE, {"CLUSTER_NAME": "demo-1"}, required_keys=frozenset(),
            )

    def test_value_containing_token_not_expanded(self):
        out = render_template(
            MINI_TEMPLATE,
            {"CLUSTER_NAME": "demo-1", "PASSWORD": "${CLUSTER_NAME}"},
            required_keys=frozenset(),
        )
        assert yaml.safe_load(out)["auth"]["password"] == "${CLUSTER_NAME}"

    @pytest.mark.parametrize(
        "password",
        [
            'a: b', "x # not a comment", 'quote"d', "it's", "new\nline",
            "back\\slash", "- item", "pa\U0001F600ss", " padded ", "tab\there",
        ],
    )
    def test_structural_characters_survive(self, password):
        out = render_template(
            MINI_TEMPLATE,
            {"CLUSTER_NAME": "demo-1", "PASSWORD": password},
            required_keys=frozenset(),
        )
        assert yaml.safe_load(out)["auth"]["password"] == password

    def test_yaml_quote_numeric_stays_string(self):
        assert yaml.safe_load("k: " + yaml_quote("12345"))["k"] == "12345"

    def test_yaml_quote_single_line(self):
        quoted = yaml_quote("x" * 200 + "\nend")
        assert "\n" not in quoted
        assert quoted.startswith('"') and quoted.endswith('"')

    def test_yaml_quote_keeps_emoji_literal(self):
        assert yaml_quote("pa\U0001F600ss") == '"pa\U0001F600ss"'


# ── TestVerifyDocument ───────────────────────────────────────────────


class TestVerifyDocument:
    def test_invalid_yaml(self):
        with pytest.raises(ValueError, match="not valid YAML"):
            verify_document("a: [unclosed", {})

    def test_not_a_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            verify_document("- a\n- b\n", {})

    def test_mangled_value_detected(self):
        with pytest.raises(ValueError, match="PASSWORD"):
            verify_document("auth:\n  password: 'a'\n", {"PASSWORD": "a: b"})


# ── TestRenderValues ─────────────────────────────────────────────────


class TestRenderValues:
    def test_all_fields_substituted(self):
        doc = yaml.safe_load(render_values(_config()))
        dest = doc["destinations"][0]
        assert doc["cluster"]["name"] == "demo-1"
        assert dest["url"] == METRICS_URL
        assert dest["extraLabels"] == {
            "customer_id": "W111",
            "region": "us-east-1",
            "project_id": "p1",
            "cloud_platform": "AWS",
            "stage": "preprod",
            "env_type": "prod",
        }
        assert dest["auth"] == {"type": "basic", "username": "12345", "password": "tok"}

    def test_no_tokens_left(self):
        assert "${" not in render_values(_config())

    def test_deterministic(self):
        assert render_values(_config()) == render_values(_config())

    def test_rest_of_template_untouched(self):
        out = render_values(_config())
        assert "kube_pod_info" in out
        assert "alloy_build_info" in out

    def test_non_bmp_password(self):
        doc = yaml.safe_load(render_values(_config(password=SecretStr("pa\U0001F600ss"))))
        assert doc["destinations"][0]["auth"]["password"] == "pa\U0001F600ss"

    def test_substitutions_hold_raw_values(self):
        subs = build_substitutions(_config(password=SecretStr("p@ss")))
        assert subs["PASSWORD"] == "p@ss"
        assert subs["CLUSTER_NAME"] == "demo-1"


# ── TestWriteValuesFile ──────────────────────────────────────────────


class TestWriteValuesFile:
    def test_path_named_after_cluster(self, tmp_path):
        assert values_path(_config(), tmp_path) == tmp_path / "values-demo-1.yaml"

    def test_owner_only_permissions(self, tmp_path):
        dest = write_values_file(tmp_path / "values-demo-1.yaml", "a: 1\n")
        assert stat.S_IMODE(dest.stat().st_mode) == 0o600

    def test_content_written(self, tmp_path):
        dest = write_values_file(tmp_path / "v.yaml", "a: 1\n")
        assert dest.read_text(encoding="utf-8") == "a: 1\n"

    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "v.yaml"
        target.write_text("old\n", encoding="utf-8")
        target.chmod(0o644)
        write_values_file(target, "new: 1\n")
        assert target.read_text(encoding="utf-8") == "new: 1\n"
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_no_temp_files_left(self, tmp_path):
        write_values_file(tmp_path / "v.yaml", "a: 1\n")
        assert [p.name for p in tmp_path.iterdir()] == ["v.yaml"]

    def test_byte_identical_across_runs(self, tmp_path):
        a = write_values_file(tmp_path / "a.yaml", render_values(_config()))
        b = write_values_file(tmp_path / "b.yaml", render_values(_config()))
        assert a.read_bytes() == b.read_bytes()

    def test_creates_directory(self, tmp_path):
        dest = write_values_file(tmp_path / "nested" / "v.yaml", "a: 1\n")
        assert dest.exists()
