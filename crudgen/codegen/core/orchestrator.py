"""Generation run state machine using the ``transitions`` library.

A run moves idle -> validating -> planning -> rendering -> complete, or to
failed from any working state. Validation and planning are sequential;
renders are independent and run on a thread pool, but the artifact list
keeps the planned order.
"""

import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional

from transitions import Machine, State

from .config import check_project_context
from .errors import GenerationCancelled
from .generator import (
    ArtifactPlan,
    CodeGenerator,
    GeneratedArtifact,
    GenerationResult,
)
from .schema import EntitySpec, ProjectContext
from ...logging_config import get_logger

logger = get_logger(__name__)

STATES: List[State] = [
    State("idle"),
    State("validating"),
    State("planning"),
    State("rendering"),
    State("complete"),
    State("failed"),
]

TRANSITIONS: List[Dict[str, Any]] = [
    {"trigger": "start", "source": "idle", "dest": "validating"},
    {"trigger": "validated", "source": "validating", "dest": "planning"},
    {"trigger": "planned", "source": "planning", "dest": "rendering"},
    {"trigger": "rendered", "source": "rendering", "dest": "complete"},
    {
        "trigger": "fail",
        "source": ["idle", "validating", "planning", "rendering"],
        "dest": "failed",
    },
    {"trigger": "reset", "source": ["complete", "failed"], "dest": "idle"},
]


class GenerationOrchestrator:
    """
    Drives one entity through validation, planning and rendering.

    Any error aborts the run: no artifacts are returned and the error is
    raised to the caller. There are no retries.
    """

    def __init__(
        self,
        generator: CodeGenerator,
        max_workers: int = 4,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.generator = generator
        self.max_workers = max(1, max_workers)
        self.cancel_event = cancel_event or threading.Event()
        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="idle",
            auto_transitions=False,
        )

    def cancel(self):
        """Request cancellation; takes effect before the next render."""
        self.cancel_event.set()

    def _check_cancelled(self):
        if self.cancel_event.is_set():
            raise GenerationCancelled("Generation cancelled by caller")

    def run(self, entity: EntitySpec, context: ProjectContext) -> GenerationResult:
        """
        Generate every artifact for an entity.

        Args:
            entity: Entity to generate
            context: Project context of the run

        Returns:
            GenerationResult with artifacts in planned order

        Raises:
            GeneratorError: The first error of the run (validation, template,
                configuration or cancellation)
        """
        if self.state != "idle":
            self.reset()

        started = time.perf_counter()
        try:
            self._check_cancelled()
            self.start()

            check_project_context(context)
            warnings = self.generator.validate_entity(entity, context)
            self.validated()

            plans = self.generator.plan(entity, context)
            logger.debug(
                "Planned %d artifact(s) for '%s': %s",
                len(plans), entity.name, ", ".join(p.kind.value for p in plans),
            )
            self.planned()

            artifacts = self._render_all(plans)
            self.rendered()
        except Exception:
            self.fail()
            raise

        elapsed = time.perf_counter() - started
        logger.info(
            "Generated %d artifact(s) for '%s' in %.3fs",
            len(artifacts), entity.name, elapsed,
        )
        return GenerationResult(
            artifacts=artifacts,
            warnings=warnings,
            metadata={
                "language": self.generator.language_name,
                "entity": entity.name,
                "backend": context.backend_family.value,
                "dialect": context.resolved_dialect.value,
                "artifact_count": len(artifacts),
            },
        )

    def _render_one(self, plan: ArtifactPlan) -> GeneratedArtifact:
        self._check_cancelled()
        started = time.perf_counter()
        artifact = self.generator.render(plan)
        logger.debug(
            "Rendered %s -> %s in %.4fs",
            plan.kind.value, plan.path, time.perf_counter() - started,
        )
        return artifact

    def _render_all(self, plans: List[ArtifactPlan]) -> List[GeneratedArtifact]:
        if self.max_workers == 1:
            return [self._render_one(plan) for plan in plans]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self._render_one, plan) for plan in plans]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in futures:
                if future in done and future.exception() is not None:
                    for other in pending:
                        other.cancel()
                    raise future.exception()
            return [future.result() for future in futures]
