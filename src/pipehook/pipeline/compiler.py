"""Pipeline compiler: rewrites single-step model resolvers into hook pipelines.

For every standard operation of an entity annotated with @hook the compiler
replaces the storage layer's resolver with a pipeline resolver whose
functions run in the fixed order

    [before hook?] -> wrapped data operation -> [after hook?]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pipehook.config import PipehookConfig, get_config
from pipehook.directive import STAGES, EntityDefinition, HookDirective, validate_entity
from pipehook.operations import ModelOperation, OperationTarget, model_operations
from pipehook.pipeline.hoisting import HoistedContentRegistry
from pipehook.pipeline.provisioner import ComputeIdentity, SharedComputeProvisioner
from pipehook.pipeline.steps import StepFactory
from pipehook.resources import fn, ids
from pipehook.resources.graph import Resource, ResourceGraph
from pipehook.templates import PASSTHROUGH_RESPONSE_TEMPLATE, prepend_content, stash_request_template

logger = logging.getLogger(__name__)

RESOLVER = "AWS::AppSync::Resolver"


@dataclass
class EntityPipelines:
    """What the compiler produced for one entity.

    Attributes:
        entity: Entity name
        group: Deployment group the pipelines were placed in
        hook_steps: Hook step id per stage, for stages with any operation enabled
        pipelines: Pipeline resolver id per operation
        functions: Ordered pipeline function ids per operation
    """

    entity: str
    group: str
    hook_steps: dict[str, str] = field(default_factory=dict)
    pipelines: dict[ModelOperation, str] = field(default_factory=dict)
    functions: dict[ModelOperation, list[str]] = field(default_factory=dict)


class PipelineCompiler:
    """Compiles @hook entities against a resource graph and hoisted-content registry.

    Both collaborators are owned by the caller and scoped to one run.
    """

    def __init__(
        self,
        graph: ResourceGraph,
        hoisted: HoistedContentRegistry | None = None,
        config: PipehookConfig | None = None,
    ) -> None:
        self.graph = graph
        self.hoisted = hoisted if hoisted is not None else HoistedContentRegistry()
        self.config = config or get_config()
        self.provisioner = SharedComputeProvisioner(graph, self.config)
        self.steps = StepFactory(graph, self.config)

    def compile_entity(self, entity: EntityDefinition) -> EntityPipelines:
        """Compile one annotated entity.

        Args:
            entity: Entity carrying @model and @hook

        Returns:
            Summary of the created resources

        Raises:
            InvalidDirectiveError: If @model is missing or @hook is invalid
            ResourceNotFoundError: If a standard resolver was not generated upstream
            MalformedResourceError: If a standard resolver has no properties
        """
        directive = validate_entity(entity)
        group = entity.stack or self.config.stack_name
        result = EntityPipelines(entity=entity.name, group=group)

        result.hook_steps = self._build_hook_steps(entity.name, directive, group)

        for target in model_operations(entity.name, entity.field_names):
            before = result.hook_steps.get("before") if directive.before.enabled(target.operation) else None
            after = result.hook_steps.get("after") if directive.after.enabled(target.operation) else None
            pipeline_id, functions = self.compile_operation(target, before, after, group)
            result.pipelines[target.operation] = pipeline_id
            result.functions[target.operation] = functions

        logger.info(
            "Compiled @hook(name: %s) on %s: %s",
            directive.name,
            entity.name,
            ", ".join(f"{op.value}={len(steps)}" for op, steps in result.functions.items()),
        )
        return result

    def _build_hook_steps(self, entity: str, directive: HookDirective, group: str) -> dict[str, str]:
        identity = ComputeIdentity(directive.name, directive.region)
        hook_steps: dict[str, str] = {}
        for stage in STAGES:
            if not directive.stage(stage).any_enabled():
                continue
            data_source_id = self.provisioner.ensure(identity)
            hook_steps[stage] = self.steps.build_hook_step(
                stage, entity, directive.name, identity, data_source_id, group
            )
        return hook_steps

    def compile_operation(
        self,
        target: OperationTarget,
        before_step: str | None,
        after_step: str | None,
        group: str,
    ) -> tuple[str, list[str]]:
        """Replace one single-step resolver with a pipeline resolver.

        Args:
            target: Operation to rewrite
            before_step: Hook step to run first, if enabled for this operation
            after_step: Hook step to run last, if enabled for this operation
            group: Deployment group for the new resources

        Returns:
            Tuple of (pipeline resolver id, ordered function ids)
        """
        original = self.graph.get(target.resolver_id)
        wrap_step = self.steps.build_wrap_step(target, original, group)

        # The model transformer finalises its request templates after this pass;
        # inject its auto-generated id and timestamp logic now.
        content = self.hoisted.consume(target.resolver_id)
        if content:
            properties = self.graph.get(wrap_step).properties or {}
            original_template = properties.get("RequestMappingTemplate") or ""
            properties["RequestMappingTemplate"] = prepend_content(content, original_template)

        # Drop the original entirely so no stack keeps a reference to it
        self.graph.remove(target.resolver_id)
        self.hoisted.discard(target.resolver_id)

        functions = [step_id for step_id in (before_step, wrap_step, after_step) if step_id]

        pipeline_id = ids.pipeline_id(target.type_name, target.field_name)
        self.graph.set(
            pipeline_id,
            Resource(
                type=RESOLVER,
                properties={
                    "ApiId": fn.get_att(self.config.api_logical_id, "ApiId"),
                    "TypeName": target.type_name,
                    "FieldName": target.field_name,
                    "Kind": "PIPELINE",
                    "PipelineConfig": {
                        "Functions": [fn.get_att(step_id, "FunctionId") for step_id in functions],
                    },
                    "RequestMappingTemplate": stash_request_template(target.type_name, target.field_name),
                    "ResponseMappingTemplate": PASSTHROUGH_RESPONSE_TEMPLATE,
                },
            ),
        )
        self.graph.assign_group(group, pipeline_id)
        for step_id in functions:
            self.graph.add_dependency(pipeline_id, step_id)

        logger.debug("Pipeline '%s': %s", pipeline_id, " → ".join(functions))
        return pipeline_id, functions
