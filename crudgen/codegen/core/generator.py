"""
Artifact types, the CodeGenerator contract and the result of a run.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any, Optional
from pathlib import Path

from .errors import GeneratorError
from .schema import EntitySpec, ProjectContext
from .templates import TemplateEngine, create_template_engine


class ArtifactKind(Enum):
    """Kinds of files one entity fans out into."""

    MODEL = "model"
    UPDATE_REQUEST = "update-request"
    PATCH_REQUEST = "patch-request"
    STORAGE_CONTRACT = "storage-contract"
    STORAGE_IMPL = "storage-impl"
    SERVICE = "service"
    HANDLER = "handler"
    ROUTE_FRAGMENT = "route-fragment"
    MIGRATION_UP = "migration-up"
    MIGRATION_DOWN = "migration-down"
    MIGRATION_INIT = "migration-init"
    DOCUMENTATION = "documentation"


@dataclass(frozen=True)
class ArtifactPlan:
    """
    One artifact to render.

    The context is fully resolved: templates only substitute and loop,
    every backend or policy decision has already been made.
    """

    kind: ArtifactKind
    path: str
    template: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GeneratedArtifact:
    """A rendered file, relative to the project root."""

    kind: ArtifactKind
    path: str
    content: str

    @property
    def language(self) -> str:
        """Syntax name used when displaying the artifact."""
        suffix = Path(self.path).suffix
        return {".go": "go", ".sql": "sql", ".js": "javascript", ".md": "markdown"}.get(
            suffix, "text"
        )


class CodeGenerator(ABC):
    """A target language: validates entities, plans artifacts, renders them."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        template_dir = self.get_template_directory()
        self._template_engine = create_template_engine(template_dir)

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'go')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated source files (e.g., '.go')."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Returns:
            Path to template directory or None
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    @abstractmethod
    def validate_entity(self, entity: EntitySpec,
                        context: Optional[ProjectContext] = None) -> List[str]:
        """
        Validate an entity for this target.

        Returns:
            List of warning messages (empty if no issues)

        Raises:
            ValidationError: If the entity is malformed
            TemplateError: If a field type has no mapping
        """
        pass

    @abstractmethod
    def plan(self, entity: EntitySpec, context: ProjectContext) -> List[ArtifactPlan]:
        """Decide which artifacts to produce and resolve their contexts."""
        pass

    def render(self, plan: ArtifactPlan) -> GeneratedArtifact:
        """
        Render one planned artifact.

        Args:
            plan: Artifact plan with a resolved context

        Returns:
            The rendered artifact
        """
        content = self.template_engine.render_template(
            plan.template, plan.context, artifact=plan.kind.value
        )
        return GeneratedArtifact(
            kind=plan.kind, path=plan.path, content=self.format_code(content)
        )

    def format_code(self, code: str) -> str:
        """
        Apply basic formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 1:
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        return "\n".join(formatted_lines).strip("\n") + "\n"

    def template_exists(self, template_name: str) -> bool:
        return self.template_engine.template_exists(template_name)


class GenerationResult:
    """Outcome of one run: artifacts in planned order, or an error and nothing."""

    def __init__(
        self,
        artifacts: List[GeneratedArtifact] = None,
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
    ):
        self.artifacts = artifacts or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message = None
        self.exception = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result. Failed results carry no artifacts."""
        result = cls()
        result.success = False
        result.error_message = message
        result.exception = exception
        return result

    def get(self, kind: ArtifactKind) -> Optional[GeneratedArtifact]:
        """First artifact of the given kind, if any."""
        for artifact in self.artifacts:
            if artifact.kind == kind:
                return artifact
        return None

    def of_kind(self, kind: ArtifactKind) -> List[GeneratedArtifact]:
        return [a for a in self.artifacts if a.kind == kind]

    @property
    def paths(self) -> List[str]:
        return [a.path for a in self.artifacts]


def generate_code(
    generator: CodeGenerator,
    entity: EntitySpec,
    context: ProjectContext,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> GenerationResult:
    """
    Generate all artifacts for an entity with error handling.

    Args:
        generator: Code generator instance
        entity: Entity to generate code for
        context: Project context for the run
        max_workers: Render concurrency (defaults to the generator config)
        cancel_event: Event the caller sets to cancel the run

    Returns:
        GenerationResult with artifacts, warnings and metadata, or a failed
        result carrying the first error and no artifacts
    """
    from .orchestrator import GenerationOrchestrator

    if max_workers is None:
        max_workers = generator.config.get("max_workers", 4)

    try:
        orchestrator = GenerationOrchestrator(
            generator, max_workers=max_workers, cancel_event=cancel_event
        )
        return orchestrator.run(entity, context)
    except GeneratorError as e:
        return GenerationResult.error(f"Code generation failed: {e.describe()}", exception=e)
