"""Shared fixtures: storage-layer output and @hook entities."""

from collections.abc import Callable

import pytest

from pipehook.config import PipehookConfig, clear_config_instance, set_config_instance
from pipehook.directive import EntityDefinition
from pipehook.operations import model_operations
from pipehook.resources.graph import Resource, ResourceGraph


@pytest.fixture(autouse=True)
def cleanup():
    """Clean up the global config between tests."""
    yield
    clear_config_instance()


@pytest.fixture
def config() -> PipehookConfig:
    """Default configuration, installed as the global instance."""
    config = PipehookConfig()
    set_config_instance(config)
    return config


def add_model_resources(graph: ResourceGraph, entity: str) -> None:
    """Add what the model transformer emits for ``entity``: a table data source and five resolvers."""
    table = f"{entity}Table"
    graph.set(
        table,
        Resource(type="AWS::AppSync::DataSource", properties={"Name": table, "Type": "AMAZON_DYNAMODB"}),
    )
    graph.assign_group(entity, table)

    for target in model_operations(entity):
        graph.set(
            target.resolver_id,
            Resource(
                type="AWS::AppSync::Resolver",
                properties={
                    "DataSourceName": {"Fn::GetAtt": [table, "Name"]},
                    "TypeName": target.type_name,
                    "FieldName": target.field_name,
                    "RequestMappingTemplate": f"## {target.field_name} request",
                    "ResponseMappingTemplate": "$util.toJson($ctx.result)",
                },
                depends_on=[table],
            ),
        )
        graph.assign_group(entity, target.resolver_id)


@pytest.fixture
def model_graph() -> Callable[..., ResourceGraph]:
    """Factory building a graph with model resources for the given entities."""

    def build(*entities: str) -> ResourceGraph:
        graph = ResourceGraph()
        for entity in entities:
            add_model_resources(graph, entity)
        return graph

    return build


@pytest.fixture
def hook_entity() -> Callable[..., EntityDefinition]:
    """Factory building an entity annotated with @model and @hook(**hook_args)."""

    def build(entity: str, /, *, stack: str | None = None, model: bool = True, **hook_args) -> EntityDefinition:
        directives: dict = {"model": {}} if model else {}
        directives["hook"] = hook_args
        return EntityDefinition(name=entity, directives=directives, stack=stack)

    return build
