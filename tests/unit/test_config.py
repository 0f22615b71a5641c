"""
Tests for the configuration system.

This test suite covers:
1. Field declarations and value validation
2. Table validation with defaults
3. Loading registry settings from TOML
4. Default settings generation
5. Plugin options schemas
"""

import tempfile
from pathlib import Path

import pytest

from plugworks import Plugin, PluginOptionsError
from plugworks.config import (
    REGISTRY_SCHEMA,
    ConfigError,
    RegistrySettings,
    field,
    load_settings,
    write_default_settings,
)
from plugworks.config.schema import (
    ConfigField,
    SchemaError,
    ValidationError,
    generate_default_config,
    validate_config,
)


@pytest.fixture(autouse=True)
def no_development_env(monkeypatch):
    monkeypatch.delenv("PLUGWORKS_ENV", raising=False)


class TestConfigField:
    """Test field declarations."""

    def test_default_type_mismatch(self):
        """The default must match the declared type."""
        with pytest.raises(SchemaError, match="does not match type"):
            ConfigField(int, "not an int")

    def test_range_on_unsupported_type(self):
        """min/max are rejected for types without an order or length."""
        with pytest.raises(SchemaError, match="min/max constraints"):
            ConfigField(dict, {}, min=1)

    def test_default_outside_choices(self):
        """The default must be one of the choices."""
        with pytest.raises(SchemaError, match="not in choices"):
            ConfigField(str, "x", choices=["a", "b"])

    def test_numeric_range(self):
        """Numbers are checked against min and max."""
        f = field(int, 5, "Retries", min=0, max=10)
        f.validate(0)
        f.validate(10)

        with pytest.raises(ValidationError, match="less than minimum"):
            f.validate(-1)
        with pytest.raises(ValidationError, match="greater than maximum"):
            f.validate(11)

    def test_length_range(self):
        """Strings and lists are checked by length."""
        f = field(str, "abc", min=2, max=4)
        f.validate("ab")

        with pytest.raises(ValidationError, match="Length 1"):
            f.validate("a")
        with pytest.raises(ValidationError, match="Length 3 is greater"):
            field(list, [], max=2).validate([1, 2, 3])

    def test_type_and_choices(self):
        """Wrong types and values outside choices are rejected."""
        f = field(str, "INFO", choices=["INFO", "DEBUG"])

        with pytest.raises(ValidationError, match="Expected type str"):
            f.validate(1)
        with pytest.raises(ValidationError, match="not in allowed choices"):
            f.validate("LOUD")


class TestValidateConfig:
    """Test whole-table validation."""

    def test_defaults_filled_in(self):
        """Absent fields take their defaults."""
        schema = {"a": field(int, 1), "b": field(str, "x")}

        assert validate_config({"a": 2}, schema) == {"a": 2, "b": "x"}
        assert generate_default_config(schema) == {"a": 1, "b": "x"}

    def test_unknown_field(self):
        """Fields outside the schema are rejected."""
        with pytest.raises(ValidationError, match="Unknown configuration field: c"):
            validate_config({"c": 1}, {"a": field(int, 1)})

    def test_error_names_field(self):
        """Validation errors are prefixed with the field name."""
        with pytest.raises(ValidationError, match="Field 'a'"):
            validate_config({"a": "x"}, {"a": field(int, 1)})


class TestLoadSettings:
    """Test loading registry settings."""

    def test_missing_file_gives_defaults(self):
        """A missing settings file yields default settings."""
        settings = load_settings(Path("/nonexistent/plugworks.toml"))

        assert settings == RegistrySettings()
        assert settings.trace is False
        assert settings.log_level == "INFO"

    def test_load_registry_and_plugin_tables(self):
        """[registry] and [plugins.<name>] tables are read."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "plugworks.toml"
            path.write_text(
                "[registry]\n"
                "trace = true\n"
                'log_level = "DEBUG"\n'
                "\n"
                "[plugins.greeter]\n"
                'greeting = "hello"\n'
            )

            settings = load_settings(path)

        assert settings.trace is True
        assert settings.log_level == "DEBUG"
        assert settings.options_for("greeter") == {"greeting": "hello"}
        assert settings.options_for("other") == {}

    def test_options_for_returns_copy(self):
        """Mutating returned options leaves the settings untouched."""
        settings = RegistrySettings(plugins={"a": {"x": 1}})
        settings.options_for("a")["x"] = 2
        assert settings.options_for("a") == {"x": 1}

    def test_invalid_registry_value(self):
        """Invalid [registry] values raise ConfigError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "plugworks.toml"
            path.write_text('[registry]\nlog_level = "LOUD"\n')

            with pytest.raises(ConfigError, match="Invalid \\[registry\\] settings"):
                load_settings(path)

    def test_malformed_toml(self):
        """Unparseable files raise ConfigError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "plugworks.toml"
            path.write_text("[registry\n")

            with pytest.raises(ConfigError, match="Failed to load settings"):
                load_settings(path)

    def test_plugins_must_be_tables(self):
        """Plugin entries must be tables."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "plugworks.toml"
            path.write_text('[plugins]\ngreeter = "oops"\n')

            with pytest.raises(ConfigError, match="per-plugin tables"):
                load_settings(path)

    def test_development_env_enables_trace(self, monkeypatch):
        """PLUGWORKS_ENV=development forces tracing."""
        monkeypatch.setenv("PLUGWORKS_ENV", "development")

        settings = load_settings(Path("/nonexistent/plugworks.toml"))

        assert settings.trace is True


class TestDefaultSettings:
    """Test default settings generation."""

    def test_write_and_reload(self):
        """A generated file loads back as the default settings."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_default_settings(Path(tmpdir) / "nested" / "plugworks.toml")
            content = path.read_text()

            assert "[registry]" in content
            assert f"# {REGISTRY_SCHEMA['trace'].description}" in content
            assert "# Choices: TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL" in content
            assert load_settings(path) == RegistrySettings()


class TestPluginOptions:
    """Test plugin options schemas."""

    class Greeter(Plugin):
        name = "greeter"
        options_schema = {
            "greeting": field(str, "hi", "Greeting text", min=1),
            "repeat": field(int, 1, min=1, max=3),
        }

    def test_options_without_schema(self):
        """Plugins without a schema keep options as given."""
        assert Plugin({"anything": 1}).options == {"anything": 1}
        assert Plugin().options == {}

    def test_default_schema_is_read_only(self):
        """The base class schema cannot be mutated through a subclass."""

        class Bare(Plugin):
            name = "bare"

        with pytest.raises(TypeError):
            Bare.options_schema["leak"] = field(int, 1)

        assert dict(Plugin.options_schema) == {}

    def test_defaults_applied(self):
        """Declared defaults fill in missing options."""
        plugin = self.Greeter({"repeat": 2})
        assert plugin.options == {"greeting": "hi", "repeat": 2}

    def test_invalid_options(self):
        """Options that break the schema are rejected."""
        with pytest.raises(PluginOptionsError, match="Invalid options for plugin greeter"):
            self.Greeter({"repeat": 5})

        with pytest.raises(PluginOptionsError):
            self.Greeter({"unknown": True})

    def test_options_from_settings(self):
        """Settings tables feed plugin options."""
        settings = RegistrySettings(plugins={"greeter": {"greeting": "hello"}})
        plugin = self.Greeter(settings.options_for("greeter"))
        assert plugin.options["greeting"] == "hello"
        assert plugin.state is None
