"""Tests for configuration loading and the generator registry."""

import json

import pytest

from xsdgen.codegen import ConfigError, GeneratorConfig, load_config
from xsdgen.codegen.core.config import ConfigManager
from xsdgen.codegen.languages.php import PhpGenerator
from xsdgen.codegen.languages.python import PythonGenerator
from xsdgen.codegen.registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_language_info,
    is_language_supported,
    list_supported_languages,
)


# =============================================================================
# Configuration
# =============================================================================


class TestLoadConfig:
    def test_php_defaults(self):
        config = load_config("php")
        assert config.namespace_prefix == "Generated"
        assert config.language_version == "7.1"
        assert config.strict_types is True

    def test_python_defaults(self):
        config = load_config("python")
        assert config.namespace_prefix == "generated"
        assert config.language_version == "3.10"

    def test_overrides_ignore_none(self):
        config = load_config("php", custom_config={"namespace_prefix": None, "indent_size": 2})
        assert config.namespace_prefix == "Generated"
        assert config.indent == "  "

    def test_unknown_keys_go_to_custom(self):
        config = load_config("php", custom_config={"vendor": "acme"})
        assert config.custom == {"vendor": "acme"}

    def test_unsupported_version(self):
        with pytest.raises(ConfigError, match="Unsupported php version: 8.0"):
            load_config("php", custom_config={"language_version": "8.0"})

    def test_prefix_segments(self):
        assert GeneratorConfig(namespace_prefix="Acme\\Schema").prefix_segments == ["Acme", "Schema"]
        assert GeneratorConfig(namespace_prefix="acme.schema").prefix_segments == ["acme", "schema"]


class TestConfigFile:
    def test_file_values_then_overrides(self, tmp_path):
        path = tmp_path / "xsdgen.json"
        path.write_text(json.dumps({"namespace_prefix": "Acme", "add_comments": False}))

        config = load_config("php", custom_config={"namespace_prefix": "Other"}, config_file=path)

        assert config.namespace_prefix == "Other"
        assert config.add_comments is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config("php", config_file=tmp_path / "missing.json")

    def test_not_json_extension(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("a: 1")
        with pytest.raises(ConfigError, match="must be JSON"):
            load_config("php", config_file=path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{broken")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config("php", config_file=path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="JSON object"):
            load_config("php", config_file=path)

    def test_save_round_trip(self, tmp_path):
        manager = ConfigManager()
        config = manager.get_config("php", {"namespace_prefix": "Acme", "vendor": "x"})
        path = tmp_path / "saved.json"

        manager.save_config(config, path)
        saved = json.loads(path.read_text())

        assert saved["namespace_prefix"] == "Acme"
        assert saved["vendor"] == "x"
        assert "custom" not in saved


class TestValidateConfig:
    def test_clean_config(self):
        manager = ConfigManager()
        assert manager.validate_config(manager.get_config("php"), "php") == []

    def test_warnings(self):
        manager = ConfigManager()
        config = GeneratorConfig(namespace_prefix="Acme\\1bad", indent_size=0, line_ending="\r")
        warnings = manager.validate_config(config, "php")
        assert "Invalid indent_size: 0" in warnings
        assert "Unusual line_ending: '\\r'" in warnings
        assert "Invalid namespace segment: 1bad" in warnings

    def test_python_output_directory_mismatch(self):
        manager = ConfigManager()
        config = manager.get_config("python", {"output_directory": "out"})
        assert manager.validate_config(config, "python") == [
            "Output directory 'out' does not match package 'generated'; "
            "generated imports will not resolve"
        ]


# =============================================================================
# Registry
# =============================================================================


class TestRegistry:
    def test_builtin_languages(self):
        assert list_supported_languages() == ["php", "python"]

    def test_alias(self):
        assert is_language_supported("py")
        assert isinstance(get_generator("py"), PythonGenerator)
        assert isinstance(get_generator("PHP"), PhpGenerator)

    def test_unknown_language(self):
        with pytest.raises(RegistryError, match="No generator registered for language: cobol"):
            get_generator("cobol")

    def test_config_forms(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"namespace_prefix": "FromFile"}))

        assert get_generator("php", {"namespace_prefix": "FromDict"}).config.namespace_prefix == "FromDict"
        assert get_generator("php", path).config.namespace_prefix == "FromFile"
        config = GeneratorConfig(namespace_prefix="Given", language_version="7.0")
        assert get_generator("php", config).config is config

    def test_invalid_config_type(self):
        with pytest.raises(RegistryError, match="Invalid config type"):
            get_generator("php", 42)

    def test_language_info(self):
        info = get_language_info("py")
        assert info["name"] == "python"
        assert info["file_extension"] == ".py"
        assert info["versions"] == ["3.8", "3.10"]
        assert info["aliases"] == ["py"]
        assert info["default_namespace_prefix"] == "generated"


class TestGeneratorRegistry:
    def test_rejects_non_generator(self):
        with pytest.raises(RegistryError, match="must inherit from CodeGenerator"):
            GeneratorRegistry().register("text", str)

    def test_alias_conflict(self):
        registry = GeneratorRegistry()
        registry.register("php", PhpGenerator, aliases=["p"])
        with pytest.raises(RegistryError, match="already points to 'php'"):
            registry.register("python", PythonGenerator, aliases=["p"])

    def test_unregister_drops_aliases(self):
        registry = GeneratorRegistry()
        registry.register("python", PythonGenerator, aliases=["py"])
        registry.unregister("python")
        assert not registry.is_supported("py")
        assert registry.list_languages() == []

    def test_list_all_names(self):
        registry = GeneratorRegistry()
        registry.register("python", PythonGenerator, aliases=["py", "python3"])
        assert registry.list_all_names() == {"python": ["python", "py", "python3"]}
