"""
Go code generator module.

Generates a layered Go CRUD slice (model, repository, service, handler,
routes, migrations and docs) for one entity.
"""

from .generator import GoCrudGenerator, create_go_generator
from .naming import create_go_sanitizer
from .planner import GoArtifactPlanner
from .types import GoType, GoTypeMapper, TypeMapping, map_type

__all__ = [
    "GoCrudGenerator",
    "GoArtifactPlanner",
    "GoType",
    "GoTypeMapper",
    "TypeMapping",
    "create_go_generator",
    "create_go_sanitizer",
    "map_type",
]
