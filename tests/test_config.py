"""Tests for ConfigSource and configuration projection."""

import json

import pytest

from imagefit.core.config import ConfigSource, normalize, project_config_map
from imagefit.core.exceptions import ConfigurationError, ConfigurationProjectionError


class TestNormalize:
    """Tests for dotted key expansion."""

    def test_flat_and_nested_keys_merge(self):
        """Test that dotted and nested keys merge into one tree."""
        tree = normalize(
            {
                "storage.src.type": "fs",
                "storage": {"src": {"location": "/tmp/a"}, "dst.type": "s3"},
            }
        )
        assert tree == {
            "storage": {
                "src": {"type": "fs", "location": "/tmp/a"},
                "dst": {"type": "s3"},
            }
        }

    def test_scalar_and_section_conflict(self):
        """Test a scalar key followed by a section with the same name."""
        with pytest.raises(ConfigurationError, match="both a value and a section"):
            normalize({"kvstore": "redis", "kvstore.type": "redis"})

    def test_section_then_scalar_conflict(self):
        """Test a section followed by a scalar with the same name."""
        with pytest.raises(ConfigurationError):
            normalize({"kvstore.type": "redis", "kvstore": "redis"})


class TestConfigSource:
    """Tests for typed lookups."""

    def test_missing_keys_return_zero_values(self):
        """Test zero values for missing keys."""
        config = ConfigSource({})
        assert config.get("a.b") is None
        assert config.get_string("a.b") == ""
        assert config.get_int("a.b") == 0
        assert config.get_bool("a.b") is False
        assert config.get_mapping("a.b") == {}
        assert not config.has("a.b")

    def test_get_string_coerces_scalars(self):
        """Test string coercion of numbers, booleans and None."""
        config = ConfigSource({"a": 12, "b": True, "c": "x"})
        assert config.get_string("a") == "12"
        assert config.get_string("b") == "true"
        assert config.get_string("c") == "x"

    def test_get_string_rejects_sections(self):
        """Test that sections are not strings."""
        config = ConfigSource({"a.b": "x"})
        with pytest.raises(ConfigurationError):
            config.get_string("a")

    @pytest.mark.parametrize("raw, expected", [(80, 80), ("80", 80), (" 7 ", 7), (3.0, 3), ("", 0)])
    def test_get_int(self, raw, expected):
        """Test integer parsing."""
        assert ConfigSource({"options.quality": raw}).get_int("options.quality") == expected

    def test_get_int_invalid(self):
        """Test that non-integers raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="options.quality"):
            ConfigSource({"options.quality": "high"}).get_int("options.quality")

    @pytest.mark.parametrize(
        "raw, expected",
        [(True, True), ("yes", True), ("ON", True), (1, True), ("false", False), (0, False), ("", False)],
    )
    def test_get_bool(self, raw, expected):
        """Test boolean parsing."""
        assert ConfigSource({"flag": raw}).get_bool("flag") is expected

    def test_get_bool_invalid(self):
        """Test that unrecognised booleans raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ConfigSource({"flag": "maybe"}).get_bool("flag")

    def test_get_mapping_returns_copy(self):
        """Test that get_mapping returns a detached copy."""
        config = ConfigSource({"sentry.tags.env": "prod"})
        tags = config.get_mapping("sentry.tags")
        tags["env"] = "dev"
        assert config.get_string("sentry.tags.env") == "prod"

    def test_from_json_file(self, tmp_path):
        """Test loading a JSON file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"kvstore": {"type": "cache"}}))
        assert ConfigSource.from_file(path).get_string("kvstore.type") == "cache"

    def test_from_yaml_file(self, tmp_path):
        """Test loading a YAML file."""
        path = tmp_path / "config.yaml"
        path.write_text("shard:\n  width: 3\n  depth: 4\n")
        config = ConfigSource.from_file(path)
        assert config.get_int("shard.width") == 3
        assert config.get_int("shard.depth") == 4

    def test_from_empty_yaml_file(self, tmp_path):
        """Test that an empty YAML file is an empty config."""
        path = tmp_path / "config.yml"
        path.write_text("")
        assert ConfigSource.from_file(path).as_dict() == {}

    def test_from_file_rejects_non_mapping_root(self, tmp_path):
        """Test that the document root must be a mapping."""
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            ConfigSource.from_file(path)

    def test_from_file_rejects_unknown_extension(self, tmp_path):
        """Test that only JSON and YAML files are accepted."""
        path = tmp_path / "config.ini"
        path.write_text("[x]")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            ConfigSource.from_file(path)

    def test_from_file_missing(self, tmp_path):
        """Test a missing file."""
        with pytest.raises(ConfigurationError, match="Cannot read"):
            ConfigSource.from_file(tmp_path / "absent.json")

    def test_from_file_malformed(self, tmp_path):
        """Test a file that fails to parse."""
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Malformed"):
            ConfigSource.from_file(path)

    @pytest.mark.parametrize("name", ["config.json", "config.yaml"])
    def test_from_file_invalid_utf8(self, tmp_path, name):
        """Test that undecodable bytes are reported as a malformed file."""
        path = tmp_path / name
        path.write_bytes(b'kvstore:\n  type: "\xff"\n')
        with pytest.raises(ConfigurationError, match="Malformed") as exc_info:
            ConfigSource.from_file(path)
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


class TestProjectConfigMap:
    """Tests for project_config_map."""

    def test_projects_scalars_to_strings(self):
        """Test projecting a section to a string map."""
        config = ConfigSource(
            {"kvstore": {"type": "redis", "port": 6380, "ssl": False, "password": None}}
        )
        assert project_config_map(config, "kvstore") == {
            "type": "redis",
            "port": "6380",
            "ssl": "false",
            "password": "",
        }

    def test_missing_namespace_is_empty(self):
        """Test that an absent section projects to an empty map."""
        assert project_config_map(ConfigSource({}), "storage.dst") == {}

    def test_nested_section_fails_with_namespace(self):
        """Test that nested sections fail and name the key."""
        config = ConfigSource({"storage.src": {"type": "fs", "extra": {"a": 1}}})
        with pytest.raises(ConfigurationProjectionError) as exc_info:
            project_config_map(config, "storage.src")
        assert exc_info.value.namespace == "storage.src"
        assert exc_info.value.key == "extra"
        assert "storage.src.extra" in str(exc_info.value)

    def test_list_value_fails(self):
        """Test that lists cannot be projected."""
        config = ConfigSource({"sentry.tags": {"teams": ["a", "b"]}})
        with pytest.raises(ConfigurationProjectionError):
            project_config_map(config, "sentry.tags")

    def test_scalar_namespace_fails(self):
        """Test that a scalar namespace cannot be projected."""
        config = ConfigSource({"kvstore": "redis"})
        with pytest.raises(ConfigurationProjectionError, match="kvstore"):
            project_config_map(config, "kvstore")
