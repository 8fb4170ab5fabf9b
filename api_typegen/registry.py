"""
Renderer registry.

Maps output names (``python``, ``manifest``) and their aliases to
:class:`CodeGenerator` subclasses, and builds configured instances.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from .core.config import ConfigError, GeneratorConfig, load_config
from .core.generator import CodeGenerator, GeneratorError
from .core.templates import TemplateError
from .logging_config import get_logger

logger = get_logger(__name__)

ConfigSource = Union[GeneratorConfig, Dict[str, Any], str, Path]


class RegistryError(Exception):
    """Unknown output, bad registration or failed renderer construction."""

    pass


@dataclass
class Registration:
    """One registered renderer and the names it answers to."""

    name: str
    generator_class: Type[CodeGenerator]
    aliases: List[str] = field(default_factory=list)


class GeneratorRegistry:
    """Lookup table from output names and aliases to renderers."""

    def __init__(self):
        self._entries: Dict[str, Registration] = {}
        self._alias_index: Dict[str, str] = {}

    def register(
        self,
        language: str,
        generator_class: Type[CodeGenerator],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a renderer under a primary name.

        Registration is all-or-nothing: conflicts are detected before the
        table is touched.

        Args:
            language: Primary output name
            generator_class: ``CodeGenerator`` subclass
            aliases: Extra names resolving to the same renderer
            replace: Overwrite an existing registration instead of skipping it

        Raises:
            RegistryError: If the class is not a renderer or an alias is taken
        """
        if not isinstance(generator_class, type) or not issubclass(generator_class, CodeGenerator):
            raise RegistryError(f"{generator_class!r} is not a CodeGenerator subclass")

        key = language.lower()
        if key in self._entries and not replace:
            logger.debug(f"Output {key} already registered, keeping existing renderer")
            return

        alias_keys = sorted({a.lower() for a in aliases or []} - {key})
        if not replace:
            for alias in alias_keys:
                if alias in self._entries:
                    raise RegistryError(f"Alias '{alias}' conflicts with a primary output name")
                owner = self._alias_index.get(alias)
                if owner and owner != key:
                    raise RegistryError(f"Alias '{alias}' already points to '{owner}'")

        if replace:
            self.unregister(key)
        self._entries[key] = Registration(key, generator_class, alias_keys)
        self._alias_index.update({alias: key for alias in alias_keys})

    def unregister(self, language: str):
        """Drop a renderer together with its aliases."""
        key = language.lower()
        entry = self._entries.pop(key, None)
        if entry is None:
            return
        for alias in entry.aliases:
            if self._alias_index.get(alias) == key:
                del self._alias_index[alias]

    def resolve(self, language: str) -> Registration:
        """
        Find the registration for a primary name or alias.

        Raises:
            RegistryError: If nothing answers to ``language``
        """
        key = language.lower()
        key = self._alias_index.get(key, key)
        try:
            return self._entries[key]
        except KeyError:
            raise RegistryError(
                f"No generator registered for language: {language}. "
                f"Available: {', '.join(self.list_languages())}"
            ) from None

    def get_generator_class(self, language: str) -> Type[CodeGenerator]:
        return self.resolve(language).generator_class

    def create_generator(self, language: str, config: Optional[ConfigSource] = None) -> CodeGenerator:
        """
        Build a configured renderer.

        Config resolution always uses the primary name, so an alias picks up
        its renderer's language defaults.

        Args:
            language: Output name or alias
            config: A ready ``GeneratorConfig``, override dict or config file path

        Raises:
            RegistryError: On unknown output, bad config type or construction failure
        """
        entry = self.resolve(language)

        if isinstance(config, GeneratorConfig):
            final_config = config
        elif isinstance(config, (str, Path)):
            final_config = load_config(entry.name, config_file=config)
        elif isinstance(config, dict):
            final_config = load_config(entry.name, custom_config=config)
        elif config is None:
            final_config = load_config(entry.name)
        else:
            raise RegistryError(f"Invalid config type: {type(config)}")

        try:
            return entry.generator_class(final_config)
        except (ConfigError, GeneratorError, TemplateError, TypeError) as e:
            raise RegistryError(f"Failed to create {entry.name} generator: {e}") from e

    def list_languages(self) -> List[str]:
        """Primary output names, sorted."""
        return sorted(self._entries)

    def is_supported(self, language: str) -> bool:
        key = language.lower()
        return key in self._entries or key in self._alias_index

    def get_language_info(self, language: str) -> Dict[str, Any]:
        """Describe a renderer: display name, extension, class and aliases."""
        entry = self.resolve(language)
        generator = entry.generator_class(load_config(entry.name))
        return {
            "name": generator.language_name,
            "class": entry.generator_class.__name__,
            "file_extension": generator.file_extension,
            "aliases": list(entry.aliases),
            "module": entry.generator_class.__module__,
        }


_global_registry: Optional[GeneratorRegistry] = None


def get_registry() -> GeneratorRegistry:
    """Return the shared registry, registering the built-in renderers on first use."""
    global _global_registry
    if _global_registry is None:
        _global_registry = GeneratorRegistry()
        _register_builtins(_global_registry)
    return _global_registry


def _register_builtins(registry: GeneratorRegistry):
    from .languages.manifest import ManifestGenerator
    from .languages.python import PythonGenerator

    registry.register("python", PythonGenerator, aliases=["py", "dataclass"])
    registry.register("manifest", ManifestGenerator, aliases=["json"])


def register_generator(
    language: str,
    generator_class: Type[CodeGenerator],
    aliases: Optional[List[str]] = None,
):
    """Register a renderer in the shared registry."""
    get_registry().register(language, generator_class, aliases)


def get_generator(language: str, config: Optional[ConfigSource] = None) -> CodeGenerator:
    """Build a renderer from the shared registry."""
    return get_registry().create_generator(language, config)


def list_supported_languages() -> List[str]:
    return get_registry().list_languages()


def is_language_supported(language: str) -> bool:
    return get_registry().is_supported(language)


def get_language_info(language: str) -> Dict[str, Any]:
    return get_registry().get_language_info(language)


def list_all_language_info() -> Dict[str, Dict[str, Any]]:
    """Describe every registered renderer, skipping ones that fail to build."""
    result = {}
    for language in list_supported_languages():
        try:
            result[language] = get_language_info(language)
        except RegistryError as e:
            logger.warning(f"Skipping {language}: {e}")
    return result
