"""
Generator settings and the ProjectContext they produce.

Sources are merged lowest first: built-in defaults, a JSON file, CRUDGEN_*
environment variables, explicit overrides.
"""

import json
import os
import re
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import asdict, dataclass, field
from datetime import datetime

from .errors import ConfigurationError
from .schema import (
    BACKEND_DIALECTS,
    TEXT_LIST_STRATEGIES,
    BackendFamily,
    Dialect,
    ProjectContext,
)

# Alias kept for callers that know the configuration error by its short name
ConfigError = ConfigurationError

ENV_PREFIX = "CRUDGEN_"

MODULE_ROOT_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._~\-]*(/[A-Za-z0-9._~\-]+)*$")

BACKEND_ALIASES = {
    "relational": BackendFamily.RELATIONAL,
    "sql": BackendFamily.RELATIONAL,
    "postgresql": BackendFamily.RELATIONAL,
    "postgres": BackendFamily.RELATIONAL,
    "mysql": BackendFamily.RELATIONAL,
    "document": BackendFamily.DOCUMENT,
    "mongodb": BackendFamily.DOCUMENT,
    "mongo": BackendFamily.DOCUMENT,
}

DIALECT_ALIASES = {
    "postgresql": Dialect.POSTGRESQL,
    "postgres": Dialect.POSTGRESQL,
    "mysql": Dialect.MYSQL,
    "mongodb": Dialect.MONGODB,
    "mongo": Dialect.MONGODB,
}


@dataclass
class GeneratorConfig:
    """Settings for one generator invocation."""

    # Project settings
    module_root: Optional[str] = None
    backend: str = "relational"
    dialect: Optional[str] = None
    project_name: Optional[str] = None

    # API settings
    api_prefix: str = "/api"
    default_page_size: int = 10
    max_page_size: int = 100

    # Type handling
    text_list_strategy: str = "native"

    # Output settings
    add_comments: bool = True
    max_workers: int = 4
    log_level: str = "WARNING"

    # Extra settings not modelled above
    custom: Dict[str, Any] = field(default_factory=dict)


def resolve_backend(value: Union[str, BackendFamily]) -> BackendFamily:
    if isinstance(value, BackendFamily):
        return value
    try:
        return BACKEND_ALIASES[str(value).strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown backend '{value}'. Available: relational, document"
        )


def resolve_dialect(value: Union[str, Dialect, None], backend: BackendFamily) -> Dialect:
    """Resolve a dialect name and check it belongs to the backend family."""
    if value is None or value == "":
        return BACKEND_DIALECTS[backend][0]

    if isinstance(value, Dialect):
        dialect = value
    else:
        try:
            dialect = DIALECT_ALIASES[str(value).strip().lower()]
        except KeyError:
            raise ConfigurationError(f"Unknown dialect '{value}'")

    if dialect not in BACKEND_DIALECTS[backend]:
        allowed = ", ".join(d.value for d in BACKEND_DIALECTS[backend])
        raise ConfigurationError(
            f"Dialect '{dialect.value}' does not belong to the {backend.value} "
            f"backend family (expected one of: {allowed})"
        )
    return dialect


def check_project_context(context: Optional[ProjectContext]) -> ProjectContext:
    """
    Check that a ProjectContext is complete and internally consistent.

    Raises:
        ConfigurationError: If the context is missing or inconsistent
    """
    if context is None:
        raise ConfigurationError("Project context is required")

    if not context.module_root or not MODULE_ROOT_PATTERN.match(context.module_root):
        raise ConfigurationError(
            f"Unresolved or malformed module root: {context.module_root!r}"
        )

    if not isinstance(context.backend_family, BackendFamily):
        raise ConfigurationError(f"Unknown backend family: {context.backend_family!r}")

    if context.dialect is not None and (
        context.dialect not in BACKEND_DIALECTS[context.backend_family]
    ):
        raise ConfigurationError(
            f"Dialect '{context.dialect.value}' is inconsistent with the "
            f"{context.backend_family.value} backend family"
        )

    if context.text_list_strategy not in TEXT_LIST_STRATEGIES:
        raise ConfigurationError(
            f"Unknown text_list_strategy: {context.text_list_strategy!r}"
        )

    if not re.match(r"^[A-Za-z][A-Za-z0-9_\-]*$", context.resolved_project_name):
        raise ConfigurationError(
            f"Invalid project name: {context.resolved_project_name!r}"
        )

    return context


class ConfigManager:
    """Merges every configuration source into one GeneratorConfig."""

    def __init__(self):
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Built-in defaults for Go."""
        self._configs["go"] = {
            "backend": "relational",
            "api_prefix": "/api",
            "default_page_size": 10,
            "max_page_size": 100,
            "text_list_strategy": "native",
            "add_comments": True,
        }

    def get_config(self, language: str = "go", custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None,
                   use_env: bool = True) -> GeneratorConfig:
        """
        Resolve the effective configuration.

        Precedence, lowest first: defaults, config file, environment,
        custom overrides.

        Args:
            language: Target language name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file
            use_env: Whether CRUDGEN_* environment variables apply

        Returns:
            The merged GeneratorConfig
        """
        base_config = dict(self._configs.get(language, {}))
        base_config["custom"] = dict(base_config.get("custom", {}))

        if config_file:
            base_config.update(self._load_config_file(config_file))

        if use_env:
            base_config.update(self._load_env())

        if custom_config:
            base_config.update(
                {k: v for k, v in custom_config.items() if v is not None}
            )

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Read a JSON object of settings."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == '.json':
            raise ConfigurationError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file {path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration file {path}: {e}")

        if not isinstance(config, dict):
            raise ConfigurationError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _load_env(self) -> Dict[str, Any]:
        """Collect CRUDGEN_* overrides from the environment."""
        known_fields = set(GeneratorConfig.__dataclass_fields__) - {"custom"}
        overrides: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            name = key[len(ENV_PREFIX):].lower()
            if name not in known_fields:
                continue
            overrides[name] = self._coerce_env_value(name, value)

        return overrides

    def _coerce_env_value(self, name: str, value: str) -> Any:
        default = GeneratorConfig.__dataclass_fields__[name].default
        if isinstance(default, bool):
            return value.strip().lower() in ("1", "true", "yes", "on")
        if isinstance(default, int):
            try:
                return int(value)
            except ValueError:
                raise ConfigurationError(f"{ENV_PREFIX}{name.upper()} must be an integer")
        return value

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Split known settings from language-specific extras."""
        known_fields = set(GeneratorConfig.__dataclass_fields__)

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get('custom', {}))
            existing_custom.update(custom_args)
            config_args['custom'] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Write a config as a flat JSON object that _load_config_file reads back."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom", {})
        config_dict.update(custom)

        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration to {path}: {e}")

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        if config.backend.lower() not in BACKEND_ALIASES:
            warnings.append(f"Invalid backend: {config.backend}")

        if config.text_list_strategy not in TEXT_LIST_STRATEGIES:
            warnings.append(f"Invalid text_list_strategy: {config.text_list_strategy}")

        if config.default_page_size < 1:
            warnings.append(f"default_page_size must be positive: {config.default_page_size}")

        if config.max_page_size < config.default_page_size:
            warnings.append(
                f"max_page_size ({config.max_page_size}) is smaller than "
                f"default_page_size ({config.default_page_size})"
            )

        if not config.api_prefix.startswith("/"):
            warnings.append(f"api_prefix should start with '/': {config.api_prefix}")

        if config.max_workers < 1:
            warnings.append(f"max_workers must be at least 1: {config.max_workers}")

        return warnings

    def to_project_context(self, config: GeneratorConfig,
                           generated_at: Optional[datetime] = None) -> ProjectContext:
        """
        Build the immutable ProjectContext for a run.

        Raises:
            ConfigurationError: If the module root is missing or settings conflict
        """
        if not config.module_root:
            raise ConfigurationError(
                "Module root is not set (use --module, the config file, "
                f"{ENV_PREFIX}MODULE_ROOT or a go.mod in the output directory)"
            )

        backend = resolve_backend(config.backend)
        dialect = resolve_dialect(config.dialect, backend)

        kwargs: Dict[str, Any] = {
            "module_root": config.module_root,
            "backend_family": backend,
            "dialect": dialect,
            "project_name": config.project_name,
            "text_list_strategy": config.text_list_strategy,
        }
        if generated_at is not None:
            kwargs["generated_at"] = generated_at

        return check_project_context(ProjectContext(**kwargs))


# Created on first use
_config_manager = None

def get_config_manager() -> ConfigManager:
    """Process-wide ConfigManager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(language: str = "go", custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """
    Merge defaults, file, environment and overrides with the shared manager.

    Args:
        language: Target language name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        The merged GeneratorConfig
    """
    manager = get_config_manager()
    return manager.get_config(language, custom_config, config_file)

