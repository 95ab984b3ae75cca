"""Tests for generator configuration."""

import pytest

from netpolgen.config import GeneratorConfig, PolicyTypesMode, load_config


class TestGeneratorConfig:
    def test_defaults(self):
        config = GeneratorConfig.from_dict(None)
        assert config.policy_types is PolicyTypesMode.ALWAYS
        assert config.generated_by == "kubescape"

    def test_from_dict(self):
        config = GeneratorConfig.from_dict({"policy_types": "observed", "generated_by": "me"})
        assert config.policy_types is PolicyTypesMode.OBSERVED
        assert config.generated_by == "me"

    def test_invalid_policy_types(self):
        with pytest.raises(ValueError, match="policy_types"):
            GeneratorConfig.from_dict({"policy_types": "sometimes"})

    def test_roundtrip(self):
        config = GeneratorConfig(policy_types=PolicyTypesMode.OBSERVED)
        assert GeneratorConfig.from_dict(config.to_dict()) == config


class TestLoadConfig:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("policy_types: observed\n")
        assert load_config(path).policy_types is PolicyTypesMode.OBSERVED

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == GeneratorConfig()

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(path)
