"""
crudgen code generation package.

Turns an entity description into a consistent set of Go CRUD artifacts.
"""

from .registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_registry,
    list_supported_languages,
)
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.schema import EntitySpec, FieldSpec, FieldType, ProjectContext
from .core.config import GeneratorConfig, ConfigManager, load_config
from .core.errors import GeneratorError

__version__ = "0.1.0"


def generate_entity(entity, language="go", config=None, generated_at=None,
                    cancel_event=None):
    """
    Generate every artifact for an entity description.

    Args:
        entity: EntitySpec or its dict description
        language: Target language name
        config: Generator configuration (GeneratorConfig, dict or file path)
        generated_at: Fixed timestamp for migration names and docs
        cancel_event: Optional threading.Event to cancel the run

    Returns:
        GenerationResult; on failure ``success`` is False and no artifacts
        are returned
    """
    if isinstance(entity, dict):
        entity = EntitySpec.from_dict(entity)

    try:
        if isinstance(config, GeneratorConfig):
            final_config = config
        elif isinstance(config, dict) or config is None:
            final_config = load_config(language, custom_config=config)
        else:
            final_config = load_config(language, config_file=config)

        context = ConfigManager().to_project_context(final_config, generated_at)
        generator = get_generator(language, final_config)
    except GeneratorError as e:
        return GenerationResult.error(f"Code generation failed: {e.describe()}", e)

    return generate_code(
        generator,
        entity,
        context,
        max_workers=final_config.max_workers,
        cancel_event=cancel_event,
    )


__all__ = [
    "GeneratorRegistry",
    "RegistryError",
    "CodeGenerator",
    "GenerationResult",
    "EntitySpec",
    "FieldSpec",
    "FieldType",
    "ProjectContext",
    "GeneratorConfig",
    "generate_code",
    "generate_entity",
    "get_generator",
    "get_registry",
    "list_supported_languages",
]
