"""Tests for loading deploy targets from JSON."""

import json

import pytest

from pyapigw.deploy.config import load_targets_from_json, parse_target, select_targets
from pyapigw.exceptions import DeployConfigError

VALID_TARGET = {
    "restApiId": "api-1",
    "options": {"profile": "deploy", "region": "eu-west-1"},
    "resources": {
        "/items": {
            "methods": {
                "GET": {"integration": {"type": "MOCK"}, "responses": {"200": {}}}
            },
            "/{id}": {},
        }
    },
    "deployment": {"stageName": "prod", "variables": {"alias": "live"}},
}


@pytest.fixture
def config_file(tmp_path):
    """Write a declaration file with two targets."""
    path = tmp_path / "apigateway.json"
    path.write_text(
        json.dumps(
            {
                "staging": dict(VALID_TARGET, restApiId="api-0"),
                "production": VALID_TARGET,
            }
        )
    )
    return path


class TestParseTarget:
    """Tests for parse_target."""

    def test_valid_target(self):
        target = parse_target("production", VALID_TARGET)

        assert target.name == "production"
        assert target.rest_api_id == "api-1"
        assert list(target.resources.children) == ["/items"]
        assert target.deployment.stage_name == "prod"
        assert target.deployment.variables == {"alias": "live"}
        assert target.options.profile == "deploy"
        assert target.options.region == "eu-west-1"

    @pytest.mark.parametrize("key", ["restApiId", "resources", "deployment"])
    def test_required_keys(self, key):
        """Missing required properties are reported with their full name."""
        data = {k: v for k, v in VALID_TARGET.items() if k != key}

        with pytest.raises(
            DeployConfigError, match=f"Required config property 'prod.{key}' missing"
        ):
            parse_target("prod", data)

    def test_target_must_be_object(self):
        with pytest.raises(DeployConfigError, match="must be an object"):
            parse_target("prod", "api-1")


class TestLoadTargets:
    """Tests for load_targets_from_json and select_targets."""

    def test_targets_keep_file_order(self, config_file):
        targets = load_targets_from_json(config_file)

        assert list(targets) == ["staging", "production"]
        assert targets["staging"].rest_api_id == "api-0"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DeployConfigError, match="Config file not found"):
            load_targets_from_json(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{")

        with pytest.raises(DeployConfigError, match="Invalid JSON"):
            load_targets_from_json(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("{}")

        with pytest.raises(DeployConfigError, match="at least one target"):
            load_targets_from_json(path)

    def test_select_named_target(self, config_file):
        targets = load_targets_from_json(config_file)

        selected = select_targets(targets, "production")

        assert [t.name for t in selected] == ["production"]

    def test_select_all_targets(self, config_file):
        targets = load_targets_from_json(config_file)

        assert [t.name for t in select_targets(targets)] == ["staging", "production"]

    def test_unknown_target(self, config_file):
        targets = load_targets_from_json(config_file)

        with pytest.raises(DeployConfigError, match="Unknown target 'qa'"):
            select_targets(targets, "qa")
