"""Multi-entity @hook compilation over one compilation arena."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from pipehook.config import PipehookConfig, get_config
from pipehook.directive import HOOK_DIRECTIVE, EntityDefinition, validate_entity
from pipehook.pipeline import EntityPipelines, HoistedContentRegistry, PipelineCompiler
from pipehook.resources.graph import ResourceGraph

logger = logging.getLogger(__name__)


@dataclass
class CompilationArena:
    """Mutable state of one compilation run.

    The caller creates an arena, runs the transformer against it, reads the
    result and discards it.

    Attributes:
        graph: Resources produced so far (storage-layer output on entry)
        hoisted: Hoisted request-template producers registered by the storage layer
    """

    graph: ResourceGraph = field(default_factory=ResourceGraph)
    hoisted: HoistedContentRegistry = field(default_factory=HoistedContentRegistry)


class HookTransformer:
    """Compiles every @hook entity of a schema, in caller order."""

    def __init__(self, config: PipehookConfig | None = None) -> None:
        self.config = config or get_config()

    def transform(self, entities: Iterable[EntityDefinition], arena: CompilationArena) -> list[EntityPipelines]:
        """Compile all entities annotated with @hook.

        Every annotated entity is validated before the graph is touched, so a
        configuration error never leaves a half-rewritten graph behind.

        Args:
            entities: Object types of the schema
            arena: Graph and hoisted-content registry of this run

        Returns:
            One result per compiled entity, in input order

        Raises:
            InvalidDirectiveError: If any annotated entity is invalid
        """
        hooked = [entity for entity in entities if entity.has_directive(HOOK_DIRECTIVE)]
        for entity in hooked:
            validate_entity(entity)

        if not hooked:
            logger.info("No types annotated with @hook")
            return []

        compiler = PipelineCompiler(arena.graph, arena.hoisted, self.config)
        results = [compiler.compile_entity(entity) for entity in hooked]

        logger.info(
            "Compiled %d @hook type(s): %s (%d resources)",
            len(results),
            ", ".join(r.entity for r in results),
            len(arena.graph),
        )
        return results
