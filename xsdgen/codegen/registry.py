"""
Registry of target languages.

Maps language names and aliases to generator classes and builds configured
generators from a GeneratorConfig, a dict of overrides or a JSON file.
"""

from typing import Dict, Type, Optional, Any, List, Union
from pathlib import Path
from .core.generator import CodeGenerator
from .core.config import GeneratorConfig, SUPPORTED_VERSIONS, load_config
from .core.errors import ConfigError

ConfigSource = Union[GeneratorConfig, Dict[str, Any], str, Path, None]


class RegistryError(ConfigError):
    """Unknown language, bad alias or unusable generator class."""

    pass


def config_for(language: str, config: ConfigSource) -> GeneratorConfig:
    """
    Turn any accepted configuration form into a GeneratorConfig.

    Raises:
        RegistryError: If ``config`` has an unsupported type.
    """
    if config is None or isinstance(config, GeneratorConfig):
        return config or load_config(language)
    if isinstance(config, dict):
        return load_config(language, custom_config=config)
    if isinstance(config, (str, Path)):
        return load_config(language, config_file=config)
    raise RegistryError(f"Invalid config type: {type(config)}")


class GeneratorRegistry:
    """Language name -> generator class, with aliases."""

    def __init__(self):
        self._generators: Dict[str, Type[CodeGenerator]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        language: str,
        generator_class: Type[CodeGenerator],
        aliases: Optional[List[str]] = None,
    ):
        """
        Register a generator under ``language`` and its aliases.

        Registering a language twice keeps the first class.

        Raises:
            RegistryError: If the class is not a CodeGenerator or an alias is taken.
        """
        if not (isinstance(generator_class, type) and issubclass(generator_class, CodeGenerator)):
            raise RegistryError("Generator class must inherit from CodeGenerator")

        key = language.lower()
        self._generators.setdefault(key, generator_class)

        for alias in aliases or []:
            alias_key = alias.lower()
            if alias_key == key:
                continue
            if alias_key in self._generators:
                raise RegistryError(f"Alias '{alias}' conflicts with existing primary language")
            owner = self._aliases.setdefault(alias_key, key)
            if owner != key:
                raise RegistryError(f"Alias '{alias}' already points to '{owner}'")

    def unregister(self, language: str):
        """Drop a language together with its aliases."""
        key = language.lower()
        self._generators.pop(key, None)
        self._aliases = {alias: owner for alias, owner in self._aliases.items() if owner != key}

    def resolve_language(self, language: str) -> str:
        """
        Primary name for a language name or alias.

        Raises:
            RegistryError: If nothing is registered under ``language``.
        """
        key = language.lower()
        key = self._aliases.get(key, key)
        if key not in self._generators:
            raise RegistryError(
                f"No generator registered for language: {language}. "
                f"Available: {', '.join(self.list_languages())}"
            )
        return key

    def create_generator(self, language: str, config: ConfigSource = None) -> CodeGenerator:
        """
        Instantiate the generator for ``language``.

        Args:
            language: Language name or alias
            config: GeneratorConfig, dict of overrides, config file path or None

        Raises:
            RegistryError: If the language is unknown
            ConfigError: If the configuration is invalid
        """
        key = self.resolve_language(language)
        return self._generators[key](config_for(key, config))

    def list_languages(self) -> List[str]:
        return sorted(self._generators)

    def aliases_of(self, language: str) -> List[str]:
        key = language.lower()
        return sorted(alias for alias, owner in self._aliases.items() if owner == key)

    def list_all_names(self) -> Dict[str, List[str]]:
        """Every primary name with the names it answers to, itself first."""
        return {language: [language, *self.aliases_of(language)] for language in self._generators}

    def is_supported(self, language: str) -> bool:
        key = language.lower()
        return key in self._generators or key in self._aliases

    def get_language_info(self, language: str) -> Dict[str, Any]:
        """
        Describe a registered language for ``--language-info``.

        Raises:
            RegistryError: If the language is unknown.
        """
        key = self.resolve_language(language)
        generator = self.create_generator(key)
        config = generator.config

        return {
            "name": generator.language_name,
            "class": type(generator).__name__,
            "file_extension": generator.file_extension,
            "aliases": self.aliases_of(key),
            "versions": list(SUPPORTED_VERSIONS.get(key, ())),
            "default_version": config.language_version,
            "default_namespace_prefix": config.namespace_prefix,
            "module": type(generator).__module__,
        }


_global_registry: Optional[GeneratorRegistry] = None


def get_registry() -> GeneratorRegistry:
    """Shared registry with php and python registered on first use."""
    global _global_registry
    if _global_registry is None:
        from .languages.php import PhpGenerator
        from .languages.python import PythonGenerator

        _global_registry = GeneratorRegistry()
        _global_registry.register("php", PhpGenerator)
        _global_registry.register("python", PythonGenerator, aliases=["py"])
    return _global_registry


def get_generator(language: str, config: ConfigSource = None) -> CodeGenerator:
    """Configured generator for ``language`` from the shared registry."""
    return get_registry().create_generator(language, config)


def list_supported_languages() -> List[str]:
    return get_registry().list_languages()


def is_language_supported(language: str) -> bool:
    return get_registry().is_supported(language)


def get_language_info(language: str) -> Dict[str, Any]:
    return get_registry().get_language_info(language)


def list_all_language_info() -> Dict[str, Dict[str, Any]]:
    return {language: get_language_info(language) for language in list_supported_languages()}
