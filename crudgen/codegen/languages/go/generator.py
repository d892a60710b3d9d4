"""
Go CRUD code generator implementation.

Generates a model, storage contract and implementation, service, HTTP
handler, route fragment, migrations and API documentation for one entity.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path

from ...core.errors import TemplateError
from ...core.generator import ArtifactPlan, CodeGenerator
from ...core.schema import EntitySpec, FieldSpec, ProjectContext
from ...core.validator import EntityValidator
from ....logging_config import get_logger
from .naming import create_go_sanitizer
from .planner import GoArtifactPlanner, check_templates
from .types import GoTypeMapper

logger = get_logger(__name__)


class GoCrudGenerator(CodeGenerator):
    """Code generator for Go CRUD layers."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize Go generator with configuration."""
        super().__init__(config)

        # Initialize naming
        self.sanitizer = create_go_sanitizer()
        self.validator = EntityValidator(self.sanitizer)

        # Extract configuration
        self.api_prefix = self.config.get("api_prefix", "/api")
        self.default_page_size = self.config.get("default_page_size", 10)
        self.max_page_size = self.config.get("max_page_size", 100)
        self.add_comments = self.config.get("add_comments", True)

        self.planner = GoArtifactPlanner(
            self.sanitizer,
            api_prefix=self.api_prefix,
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
            add_comments=self.add_comments,
        )

    def get_template_directory(self) -> Optional[Path]:
        """Return the Go templates directory."""
        template_dir = Path(__file__).parent / "templates"
        return template_dir if template_dir.exists() else None

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "go"

    @property
    def file_extension(self) -> str:
        """Return Go file extension."""
        return ".go"

    def _map_field(self, field: FieldSpec, context: ProjectContext):
        mapper = GoTypeMapper(
            context.backend_family, context.resolved_dialect, context.text_list_strategy
        )
        return mapper.map_field(field)

    def validate_entity(self, entity: EntitySpec,
                        context: Optional[ProjectContext] = None) -> List[str]:
        """Validate an entity for Go generation."""
        warnings = self.validator.validate(entity, context, type_mapper=self._map_field)

        if context is not None:
            missing = check_templates(self.template_engine, self.plan(entity, context))
            if missing:
                raise TemplateError(f"Missing templates: {', '.join(sorted(set(missing)))}")
            logger.debug(
                "Validated '%s' for %s", entity.name, context.resolved_dialect.value
            )

        return warnings

    def plan(self, entity: EntitySpec, context: ProjectContext) -> List[ArtifactPlan]:
        """Plan every artifact for an entity."""
        return self.planner.plan(entity, context)


def create_go_generator(config: Optional[Dict[str, Any]] = None) -> GoCrudGenerator:
    """Create a Go generator with default configuration."""
    default_config = {
        "api_prefix": "/api",
        "default_page_size": 10,
        "max_page_size": 100,
        "add_comments": True,
        "max_workers": 4,
    }

    merged_config = default_config.copy()
    if config:
        merged_config.update(config)

    return GoCrudGenerator(merged_config)
