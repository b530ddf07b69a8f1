"""
Unit tests for configuration loading and merging.
"""

import pytest

from opencode_harness.config import (
    ConfigurationError,
    HarnessConfig,
    apply_env_overrides,
    deep_merge,
    load_config,
    load_yaml_file,
    set_nested_value,
)


def write_config(project_dir, text: str) -> None:
    (project_dir / ".opencode" / ".harness" / "config.yaml").write_text(text)


class TestDefaults:
    """Tests for built-in defaults."""

    def test_defaults(self):
        """Test the default values."""
        config = HarnessConfig()

        assert config.version == 1
        assert config.context.max_tokens == 100000
        assert config.context.compaction_threshold == 0.8
        assert config.context.importance_decay_rate == 0.95
        assert config.context.auto_compact is False
        assert config.context.prune_threshold == 0.1
        assert config.context.token_counting == "estimate"
        assert config.memory.enabled is True
        assert config.memory.max_entries == 1000
        assert config.memory.prune_after_days == 30
        assert config.memory.context_max_tokens == 2000
        assert config.memory.compress_on_end is True

    def test_tracker_config(self):
        """Test building tracker settings from the context section."""
        config = HarnessConfig.model_validate(
            {"context": {"max_tokens": 5000, "compaction_threshold": 0.5}}
        )
        tracker = config.context.tracker_config()

        assert tracker.max_tokens == 5000
        assert tracker.compaction_threshold == 0.5
        assert tracker.importance_decay_rate == 0.95


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_nested_merge(self):
        """Test that nested dicts are merged, not replaced."""
        base = {"context": {"max_tokens": 1, "auto_compact": True}, "version": 1}
        merged = deep_merge(base, {"context": {"max_tokens": 2}})

        assert merged == {"context": {"max_tokens": 2, "auto_compact": True}, "version": 1}
        assert base["context"]["max_tokens"] == 1

    def test_none_removes_key(self):
        """Test that None drops a key."""
        assert deep_merge({"a": 1, "b": 2}, {"a": None}) == {"b": 2}

    def test_scalar_replaces_dict(self):
        """Test that a non-dict override replaces the base value."""
        assert deep_merge({"a": {"x": 1}}, {"a": [1]}) == {"a": [1]}


class TestSetNestedValue:
    """Tests for set_nested_value."""

    def test_set_creates_path(self):
        """Test that missing intermediate dicts are created."""
        assert set_nested_value({}, "a.b.c", 1) == {"a": {"b": {"c": 1}}}

    def test_set_returns_copy(self):
        """Test that the input is not modified."""
        original = {"a": {"b": 1}}
        updated = set_nested_value(original, "a.b", 2)

        assert updated == {"a": {"b": 2}}
        assert original == {"a": {"b": 1}}


class TestEnvOverrides:
    """Tests for HARNESS_* environment overrides."""

    def test_typed_values(self):
        """Test parsing of env values by section and key."""
        config = apply_env_overrides(
            {},
            {
                "HARNESS_CONTEXT_MAX_TOKENS": "50000",
                "HARNESS_CONTEXT_AUTO_COMPACT": "false",
                "HARNESS_CONTEXT_COMPACTION_THRESHOLD": "0.7",
                "HARNESS_CONTEXT_TOKEN_COUNTING": "tiktoken",
                "HARNESS_MEMORY_ENABLED": "no",
                "PATH": "/usr/bin",
            },
        )

        assert config == {
            "context": {
                "max_tokens": 50000,
                "auto_compact": False,
                "compaction_threshold": 0.7,
                "token_counting": "tiktoken",
            },
            "memory": {"enabled": False},
        }

    def test_prefix_only_ignored(self):
        """Test that variables without a key part are skipped."""
        assert apply_env_overrides({}, {"HARNESS_DEBUG": "1"}) == {}

    def test_load_config_uses_environment(self, project_dir, monkeypatch):
        """Test that load_config applies process environment overrides."""
        monkeypatch.setenv("HARNESS_MEMORY_MAX_ENTRIES", "25")

        assert load_config(project_dir).memory.max_entries == 25
        assert load_config(project_dir, skip_env=True).memory.max_entries == 1000


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file(self, project_dir):
        """Test that defaults apply without a config file."""
        assert load_config(project_dir) == HarnessConfig()

    def test_project_file(self, project_dir):
        """Test overriding values from config.yaml."""
        write_config(
            project_dir,
            "context:\n  max_tokens: 20000\n  auto_compact: false\nmemory:\n  enabled: false\n",
        )

        config = load_config(project_dir)

        assert config.context.max_tokens == 20000
        assert config.context.auto_compact is False
        assert config.context.compaction_threshold == 0.8
        assert config.memory.enabled is False

    def test_env_overrides_file(self, project_dir, monkeypatch):
        """Test precedence of environment over file."""
        write_config(project_dir, "context:\n  max_tokens: 20000\n")
        monkeypatch.setenv("HARNESS_CONTEXT_MAX_TOKENS", "30000")

        assert load_config(project_dir).context.max_tokens == 30000

    def test_empty_file(self, project_dir):
        """Test that an empty file is treated as no overrides."""
        write_config(project_dir, "")
        assert load_config(project_dir) == HarnessConfig()

    def test_invalid_yaml(self, project_dir):
        """Test that broken YAML raises ConfigurationError."""
        write_config(project_dir, "context: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(project_dir)

    def test_not_a_mapping(self, project_dir):
        """Test that a top-level list is rejected."""
        write_config(project_dir, "- a\n- b\n")

        with pytest.raises(ConfigurationError, match="Expected a mapping"):
            load_config(project_dir)

    def test_invalid_value(self, project_dir):
        """Test that schema violations raise ConfigurationError."""
        write_config(project_dir, "context:\n  compaction_threshold: 1.5\n")

        with pytest.raises(ConfigurationError, match="validation failed"):
            load_config(project_dir)

    def test_load_yaml_missing(self, temp_dir):
        """Test that a missing YAML file reads as empty."""
        assert load_yaml_file(temp_dir / "nope.yaml") == {}
