"""
Core code generation components.

Provides the entity model, naming, validation, templating and orchestration
used by every language generator.
"""

from .errors import (
    GeneratorError,
    ValidationError,
    ConfigurationError,
    TemplateError,
    GenerationCancelled,
    ArtifactWriteError,
    RollbackIncompleteError,
)
from .generator import (
    ArtifactKind,
    ArtifactPlan,
    CodeGenerator,
    GeneratedArtifact,
    GenerationResult,
    generate_code,
)
from .schema import (
    BackendFamily,
    Dialect,
    EntitySpec,
    FieldSpec,
    FieldType,
    ProjectContext,
    TimestampRole,
    UpdatePolicy,
)
from .naming import NameSanitizer, NamingCase, pluralize
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, create_template_engine
from .validator import EntityValidator

__all__ = [
    # Errors
    "GeneratorError",
    "ValidationError",
    "ConfigurationError",
    "TemplateError",
    "GenerationCancelled",
    "ArtifactWriteError",
    "RollbackIncompleteError",
    # Generator interface
    "ArtifactKind",
    "ArtifactPlan",
    "CodeGenerator",
    "GeneratedArtifact",
    "GenerationResult",
    "generate_code",
    # Entity model
    "BackendFamily",
    "Dialect",
    "EntitySpec",
    "FieldSpec",
    "FieldType",
    "ProjectContext",
    "TimestampRole",
    "UpdatePolicy",
    # Naming
    "NameSanitizer",
    "NamingCase",
    "pluralize",
    # Configuration
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Templates
    "TemplateEngine",
    "create_template_engine",
    "EntityValidator",
]
