"""Pipeline function (step) builders."""

from __future__ import annotations

import logging
from typing import Any

from pipehook.config import PipehookConfig
from pipehook.errors import MalformedResourceError
from pipehook.operations import OperationTarget
from pipehook.pipeline.provisioner import ComputeIdentity
from pipehook.resources import fn, ids
from pipehook.resources.graph import Resource, ResourceGraph
from pipehook.templates import hook_request_template, hook_response_template

logger = logging.getLogger(__name__)

FUNCTION_CONFIGURATION = "AWS::AppSync::FunctionConfiguration"


class StepFactory:
    """Builds AppSync pipeline functions for hooks and wrapped data operations.

    Attributes:
        graph: Resource graph of the current run
        config: Compiler configuration
    """

    def __init__(self, graph: ResourceGraph, config: PipehookConfig) -> None:
        self.graph = graph
        self.config = config

    def _api_id(self) -> dict[str, Any]:
        return fn.get_att(self.config.api_logical_id, "ApiId")

    def build_hook_step(
        self,
        stage: str,
        entity: str,
        hook_name: str,
        identity: ComputeIdentity,
        data_source_id: str,
        group: str | None = None,
    ) -> str:
        """Build the function invoking a hook Lambda for one stage of one entity.

        Returns the existing step unchanged if it was already built.

        Args:
            stage: "before" or "after"
            entity: Entity name, passed to the Lambda as ``model``
            hook_name: Name of the hook
            identity: Lambda identity (region becomes part of the step id)
            data_source_id: Lambda data source the step invokes
            group: Deployment group for the step (default: configured stack)

        Returns:
            Step id
        """
        step_id = ids.hook_step_id(stage, entity, hook_name, identity.region)
        if step_id in self.graph:
            logger.debug("Reusing hook step '%s'", step_id)
            return step_id

        group = group or self.config.stack_name
        same_group = self.graph.group_of(data_source_id) == group

        self.graph.set(
            step_id,
            Resource(
                type=FUNCTION_CONFIGURATION,
                properties={
                    "ApiId": self._api_id(),
                    "Name": step_id,
                    # Outside the data source's group the name is resolved through GetAtt
                    "DataSourceName": data_source_id if same_group else fn.get_att(data_source_id, "Name"),
                    "FunctionVersion": self.config.function_version,
                    "RequestMappingTemplate": hook_request_template(
                        data_source_id, stage, entity, self.config.function_version
                    ),
                    "ResponseMappingTemplate": hook_response_template(),
                },
            ),
        )
        self.graph.assign_group(group, step_id)
        if same_group:
            self.graph.add_dependency(step_id, data_source_id)
        logger.debug("Created %s hook step '%s' for %s", stage, step_id, entity)
        return step_id

    def build_wrap_step(self, target: OperationTarget, original: Resource, group: str | None = None) -> str:
        """Move a single-step resolver's data operation into a pipeline function.

        The data source and both mapping templates are copied verbatim.

        Raises:
            MalformedResourceError: If the original resolver has no properties
        """
        properties = original.properties
        if properties is None:
            raise MalformedResourceError(
                f"Could not find any properties in the generated resource '{target.resolver_id}'."
            )

        step_id = ids.wrap_step_id(target.type_name, target.field_name)
        group = group or self.config.stack_name
        self.graph.set(
            step_id,
            Resource(
                type=FUNCTION_CONFIGURATION,
                properties={
                    "ApiId": self._api_id(),
                    "DataSourceName": properties.get("DataSourceName"),
                    "FunctionVersion": self.config.function_version,
                    "Name": step_id,
                    "RequestMappingTemplate": properties.get("RequestMappingTemplate"),
                    "ResponseMappingTemplate": properties.get("ResponseMappingTemplate"),
                },
            ),
        )
        self.graph.assign_group(group, step_id)

        # Keep only edges that stay inside the step's group
        for dep in original.depends_on:
            if dep in self.graph and self.graph.group_of(dep) == group:
                self.graph.add_dependency(step_id, dep)

        logger.debug("Wrapped '%s' into pipeline function '%s'", target.resolver_id, step_id)
        return step_id
