"""
Generator settings.

Settings are layered: per-language defaults, then an optional JSON file,
then explicit overrides (CLI flags or a dict). Keys GeneratorConfig does not
know are kept in ``custom``.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional, Union, List
from dataclasses import dataclass, field, asdict, fields

from .errors import ConfigError


@dataclass
class GeneratorConfig:
    """Settings shared by the PHP and Python generators."""

    # Root namespace / package and where its tree is written
    namespace_prefix: str = "Generated"
    output_directory: str = "generated"

    language_version: str = ""
    strict_types: bool = True

    indent_size: int = 4
    line_ending: str = "\n"

    # Schema annotations become class comments
    add_comments: bool = True
    # Comment placed at the top of every generated file
    doc_header: Optional[str] = None

    debug: bool = False

    custom: Dict[str, Any] = field(default_factory=dict)

    @property
    def indent(self) -> str:
        return " " * self.indent_size

    @property
    def prefix_segments(self) -> List[str]:
        """Namespace prefix split on either separator (``Acme\\Types`` or ``acme.types``)."""
        return [part for part in self.namespace_prefix.replace("\\", ".").split(".") if part]


# Versions each language generator knows how to render; the last is the default
SUPPORTED_VERSIONS = {
    "php": ("7.0", "7.1"),
    "python": ("3.8", "3.10"),
}

LANGUAGE_DEFAULTS = {
    "php": {"namespace_prefix": "Generated"},
    "python": {"namespace_prefix": "generated"},
}

_CONFIG_FIELDS = {f.name for f in fields(GeneratorConfig)}


def read_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a JSON settings file.

    Raises:
        ConfigError: If the file is missing, not ``.json``, or not a JSON object.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")
    if path.suffix.lower() != ".json":
        raise ConfigError(f"Configuration file must be JSON: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in configuration file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to load configuration file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a JSON object: {path}")
    return data


class ConfigManager:
    """Builds, validates and saves GeneratorConfig objects."""

    def __init__(self):
        self._defaults = {language: dict(values) for language, values in LANGUAGE_DEFAULTS.items()}

    def get_config(self, language: str, custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """
        Layer defaults, file values and overrides into one config.

        Args:
            language: Target language name
            custom_config: Overrides; None values are ignored
            config_file: Path to a JSON configuration file

        Raises:
            ConfigError: If the file is unreadable or the version is unsupported
        """
        values = dict(self._defaults.get(language, {}))
        if config_file:
            values.update(read_config_file(config_file))
        if custom_config:
            values.update({key: value for key, value in custom_config.items() if value is not None})

        known = {key: value for key, value in values.items() if key in _CONFIG_FIELDS}
        extra = {key: value for key, value in values.items() if key not in _CONFIG_FIELDS}
        if extra:
            known["custom"] = {**known.get("custom", {}), **extra}

        config = GeneratorConfig(**known)
        self.check_version(config, language)
        return config

    def check_version(self, config: GeneratorConfig, language: str):
        """Fill in the default version, or reject one the generator cannot render."""
        versions = SUPPORTED_VERSIONS.get(language)
        if versions is None:
            return
        if not config.language_version:
            config.language_version = versions[-1]
        if config.language_version not in versions:
            raise ConfigError(
                f"Unsupported {language} version: {config.language_version}. "
                f"Supported: {', '.join(versions)}"
            )

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Write ``config`` as a flat JSON object; custom keys sit beside known ones."""
        path = Path(output_path)
        data = asdict(config)
        data.update(data.pop("custom"))

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}")

    def validate_config(self, config: GeneratorConfig, language: str) -> List[str]:
        """
        Soft problems with a config that still lets generation run.

        Returns:
            Warning messages, empty when the config looks right
        """
        warnings = []
        segments = config.prefix_segments

        if not segments:
            warnings.append("Empty namespace_prefix: generated code has no root namespace")
        if config.indent_size < 1:
            warnings.append(f"Invalid indent_size: {config.indent_size}")
        if config.line_ending not in ("\n", "\r\n"):
            warnings.append(f"Unusual line_ending: {config.line_ending!r}")
        warnings.extend(
            f"Invalid namespace segment: {segment}"
            for segment in segments
            if not segment.isidentifier()
        )

        # the generated modules import each other through the prefix
        if language == "python" and segments:
            output_name = Path(config.output_directory).name
            if output_name != segments[-1]:
                warnings.append(
                    f"Output directory '{output_name}' does not match package "
                    f"'{segments[-1]}'; generated imports will not resolve"
                )

        return warnings


_config_manager = None


def get_config_manager() -> ConfigManager:
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(language: str, custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """
    Configuration for ``language`` from the shared manager.

    Args:
        language: Target language name
        custom_config: Overrides; None values are ignored
        config_file: Path to a JSON configuration file

    Returns:
        GeneratorConfig with the language version filled in
    """
    return get_config_manager().get_config(language, custom_config, config_file)
