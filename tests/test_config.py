"""Tests for Config and the typed configuration sections."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from json_schema_tools.config import DEFAULT_ALLOWED_KEYWORDS, CombineSettings, Config, LintPolicy
from json_schema_tools.errors import ConfigError, ConfigNotFoundError


class TestConfigAccess:
    def test_dot_path(self) -> None:
        config = Config({"schema": {"root": "./schemas"}, "lint": {"check_key_order": True}})
        assert config.get("schema.root") == "./schemas"
        assert config.get("lint.check_key_order") is True

    def test_missing_key_returns_default(self) -> None:
        config = Config({"schema": {"root": "./schemas"}})
        assert config.get("schema.missing") is None
        assert config.get("schema.root.deeper", "fallback") == "fallback"
        assert Config().get("anything", 3) == 3


class TestConfigLoad:
    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "tools.yaml"
        path.write_text("schema:\n  root: ./schemas\ncombine:\n  defs_key: definitions\n")
        config = Config.load(path)
        assert config.get("schema.root") == "./schemas"
        assert config.combine_settings().defs_key == "definitions"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Config.load(path).lint_policy() == LintPolicy()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError):
            Config.load(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("lint: [unclosed")
        with pytest.raises(ConfigError):
            Config.load(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            Config.load(path)


class TestLintPolicy:
    def test_defaults(self) -> None:
        policy = LintPolicy()
        assert policy.allowed_keywords == DEFAULT_ALLOWED_KEYWORDS
        assert policy.allows("properties")
        assert policy.allows("x-internal")
        assert not policy.allows("patternProperties")
        assert not policy.check_key_order

    def test_extension_entries(self) -> None:
        policy = LintPolicy(allowed_keywords=["+patternProperties", "+not"])
        assert policy.allows("patternProperties")
        assert policy.allows("not")
        assert policy.allows("type")

    def test_replacement_list(self) -> None:
        policy = LintPolicy(allowed_keywords=["type", "enum"], allow_extension_keywords=False)
        assert policy.allows("enum")
        assert not policy.allows("properties")
        assert not policy.allows("x-internal")

    def test_frozen(self) -> None:
        policy = LintPolicy()
        with pytest.raises(ValidationError):
            policy.check_key_order = True

    def test_from_config(self) -> None:
        config = Config({"lint": {"check_required_order": True, "allowed_keywords": ["+if"]}})
        policy = config.lint_policy()
        assert policy.check_required_order
        assert policy.allows("if")

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Config({"lint": {"no_such_rule": True}}).lint_policy()
        assert isinstance(exc_info.value.cause, ValidationError)

    def test_section_must_be_mapping(self) -> None:
        with pytest.raises(ConfigError):
            Config({"lint": ["check_key_order"]}).lint_policy()


class TestCombineSettings:
    def test_defaults(self) -> None:
        settings = CombineSettings()
        assert settings.defs_key == "$defs"
        assert settings.prefixes == {}

    def test_from_config(self) -> None:
        settings = Config({"combine": {"prefixes": {"/common/geo": "Geo"}}}).combine_settings()
        assert settings.prefixes == {"/common/geo": "Geo"}

    def test_invalid_defs_key(self) -> None:
        with pytest.raises(ConfigError):
            Config({"combine": {"defs_key": "components"}}).combine_settings()
