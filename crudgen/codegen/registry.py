"""
Lookup table from target language names to generator classes.

Only Go ships today; ``golang`` is accepted as an alias.
"""

from dataclasses import asdict
from typing import Dict, Type, Optional, Any, List, Union
from pathlib import Path

from .core.config import GeneratorConfig, load_config
from .core.errors import GeneratorError
from .core.generator import CodeGenerator

ConfigSource = Union[GeneratorConfig, Dict[str, Any], str, Path]


class RegistryError(GeneratorError):
    """Unknown language, bad generator class or alias clash."""

    pass


def config_to_dict(config: GeneratorConfig) -> Dict[str, Any]:
    """Flatten a GeneratorConfig into the dict generators are built from."""
    values = asdict(config)
    custom = values.pop("custom", {})
    merged = dict(custom)
    merged.update(values)
    return merged


class GeneratorRegistry:
    """Maps language names and aliases to CodeGenerator subclasses."""

    def __init__(self):
        self._generators: Dict[str, Type[CodeGenerator]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        language: str,
        generator_class: Type[CodeGenerator],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Add a generator under a language name.

        A second registration of the same name is ignored unless ``replace``
        is set. Aliases are checked before anything is stored, so a rejected
        call leaves the registry unchanged.

        Args:
            language: Primary name, matched case-insensitively
            generator_class: CodeGenerator subclass
            aliases: Extra names resolving to ``language``
            replace: Overwrite an existing registration and its aliases

        Raises:
            RegistryError: If the class is not a CodeGenerator or an alias
                is already taken
        """
        if not (isinstance(generator_class, type) and issubclass(generator_class, CodeGenerator)):
            raise RegistryError("Generator class must inherit from CodeGenerator")

        language_key = language.lower()

        if language_key in self._generators and not replace:
            return

        alias_keys = [a.lower() for a in aliases or [] if a.lower() != language_key]
        if not replace:
            for alias_key in alias_keys:
                if alias_key in self._generators:
                    raise RegistryError(
                        f"Alias '{alias_key}' conflicts with existing primary language"
                    )
                if self._aliases.get(alias_key, language_key) != language_key:
                    raise RegistryError(
                        f"Alias '{alias_key}' already points to '{self._aliases[alias_key]}'"
                    )

        self._generators[language_key] = generator_class
        for alias_key in alias_keys:
            self._aliases[alias_key] = language_key

    def unregister(self, language: str):
        language_key = language.lower()
        self._generators.pop(language_key, None)

        stale = [a for a, target in self._aliases.items() if target == language_key]
        for alias in stale:
            del self._aliases[alias]

    def resolve(self, language: str) -> str:
        """Primary name for a language name or alias."""
        language_key = language.lower()
        if language_key in self._generators:
            return language_key
        if language_key in self._aliases:
            return self._aliases[language_key]

        raise RegistryError(
            f"No generator registered for language: {language}. "
            f"Available: {', '.join(self.list_languages())}"
        )

    def get_generator_class(self, language: str) -> Type[CodeGenerator]:
        return self._generators[self.resolve(language)]

    def create_generator(
        self,
        language: str,
        config: Optional[ConfigSource] = None,
    ) -> CodeGenerator:
        """
        Instantiate the generator for ``language``.

        ``config`` may be a ready GeneratorConfig, a dict of overrides, a
        path to a JSON file, or None for defaults plus environment.

        Raises:
            RegistryError: Unknown language or unsupported config type
            ConfigurationError: The config file is missing or invalid
        """
        generator_class = self.get_generator_class(language)
        primary = self.resolve(language)

        if isinstance(config, GeneratorConfig):
            final_config = config
        elif isinstance(config, (str, Path)):
            final_config = load_config(primary, config_file=config)
        elif isinstance(config, dict):
            final_config = load_config(primary, custom_config=config)
        elif config is None:
            final_config = load_config(primary)
        else:
            raise RegistryError(f"Invalid config type: {type(config)}")

        return generator_class(config_to_dict(final_config))

    def list_languages(self) -> List[str]:
        return sorted(self._generators)

    def get_aliases_for_language(self, language: str) -> List[str]:
        language_key = language.lower()
        return sorted(a for a, target in self._aliases.items() if target == language_key)

    def is_supported(self, language: str) -> bool:
        language_key = language.lower()
        return language_key in self._generators or language_key in self._aliases

    def get_language_info(self, language: str) -> Dict[str, Any]:
        """Name, class, extension and aliases of a registered language."""
        primary = self.resolve(language)
        generator_class = self._generators[primary]
        generator = generator_class({})

        return {
            "name": generator.language_name,
            "class": generator_class.__name__,
            "file_extension": generator.file_extension,
            "aliases": self.get_aliases_for_language(primary),
            "module": generator_class.__module__,
        }


_registry: Optional[GeneratorRegistry] = None


def get_registry() -> GeneratorRegistry:
    """Process-wide registry with the built-in generators registered."""
    global _registry
    if _registry is None:
        _registry = GeneratorRegistry()
        _register_builtin_generators(_registry)
    return _registry


def _register_builtin_generators(registry: GeneratorRegistry):
    from .languages.go import GoCrudGenerator

    registry.register("go", GoCrudGenerator, aliases=["golang"])


def register_generator(
    language: str,
    generator_class: Type[CodeGenerator],
    aliases: Optional[List[str]] = None,
):
    get_registry().register(language, generator_class, aliases)


def get_generator(language: str, config: Optional[ConfigSource] = None) -> CodeGenerator:
    """Build a configured generator from the process-wide registry."""
    return get_registry().create_generator(language, config)


def list_supported_languages() -> List[str]:
    return get_registry().list_languages()


def is_language_supported(language: str) -> bool:
    return get_registry().is_supported(language)
