"""Structural checks on a compiled resource graph.

Each check returns human-readable findings; an empty list means the graph is
safe to hand to the deployment layer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from graphlib import CycleError

from pipehook.resources.fn import referenced_ids
from pipehook.resources.graph import ResourceGraph

logger = logging.getLogger(__name__)


def find_dangling_dependencies(graph: ResourceGraph) -> list[str]:
    """Report DependsOn edges that point at ids missing from the graph."""
    findings: list[str] = []
    for resource_id in graph:
        for dep in graph.get(resource_id).depends_on:
            if dep not in graph:
                findings.append(f"'{resource_id}' depends on missing resource '{dep}'")
    return findings


def find_cross_group_dependencies(graph: ResourceGraph) -> list[str]:
    """Report DependsOn edges crossing deployment groups.

    Resources in different groups must only refer to each other by name.
    """
    findings: list[str] = []
    for resource_id in graph:
        group = graph.group_of(resource_id)
        for dep in graph.get(resource_id).depends_on:
            dep_group = graph.group_of(dep)
            if dep in graph and group != dep_group:
                findings.append(
                    f"'{resource_id}' ({group or 'root'}) depends on '{dep}' ({dep_group or 'root'}) across groups"
                )
    return findings


def find_unresolved_references(graph: ResourceGraph, external: Iterable[str] = ()) -> list[str]:
    """Report Ref/GetAtt targets that are neither in the graph nor declared external."""
    known = set(external)
    findings: list[str] = []
    for resource_id in graph:
        for target in sorted(referenced_ids(graph.get(resource_id).properties)):
            if target not in graph and target not in known:
                findings.append(f"'{resource_id}' references unknown resource '{target}'")
    return findings


def find_cycles(graph: ResourceGraph) -> list[str]:
    try:
        graph.deployment_order()
    except CycleError as e:
        return [f"dependency cycle: {' -> '.join(e.args[1])}"]
    return []


def validate_graph(graph: ResourceGraph, external: Iterable[str] = ()) -> list[str]:
    """Run every structural check.

    Args:
        graph: Graph to inspect
        external: Ids defined outside the graph (e.g. the GraphQL API and template parameters)

    Returns:
        List of findings (empty if valid)
    """
    findings = [
        *find_dangling_dependencies(graph),
        *find_cross_group_dependencies(graph),
        *find_unresolved_references(graph, external),
        *find_cycles(graph),
    ]
    for finding in findings:
        logger.warning("Graph validation: %s", finding)
    return findings
