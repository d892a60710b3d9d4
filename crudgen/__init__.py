"""crudgen - entity-driven Go CRUD code generator."""

from .codegen import generate_entity, get_generator, list_supported_languages
from .utils import EntityLoaderError, load_entity
from .writer import materialize

__version__ = "0.1.0"

__all__ = [
    "EntityLoaderError",
    "generate_entity",
    "get_generator",
    "list_supported_languages",
    "load_entity",
    "materialize",
]
