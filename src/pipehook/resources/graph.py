"""Resource graph for one compilation run.

Maps logical ids to CloudFormation-style resources, tracks which deployment
group (nested stack) each resource belongs to, and records ordered
``DependsOn`` edges. Deployment order is computed with
graphlib.TopologicalSorter.
"""

from __future__ import annotations

import copy
import logging
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from typing import Any

from pipehook.errors import ResourceNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Resource:
    """A single logical resource.

    Attributes:
        type: CloudFormation resource type (e.g. ``AWS::AppSync::Resolver``)
        properties: Property bag; ``None`` when an upstream resource is malformed
        depends_on: Ordered ids this resource depends on
    """

    type: str
    properties: dict[str, Any] | None = field(default_factory=dict)
    depends_on: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"Type": self.type}
        if self.properties is not None:
            data["Properties"] = self.properties
        if self.depends_on:
            data["DependsOn"] = list(self.depends_on)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Resource:
        depends_on = data.get("DependsOn", [])
        if isinstance(depends_on, str):
            depends_on = [depends_on]
        return cls(
            type=data.get("Type", ""),
            properties=copy.deepcopy(data.get("Properties")),
            depends_on=list(depends_on),
        )


class ResourceGraph:
    """Mutable store of resources, deployment groups and dependency edges.

    Owned by a single compilation run; never shared between runs.
    """

    def __init__(self) -> None:
        self._resources: dict[str, Resource] = {}
        self._groups: dict[str, str] = {}

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._resources

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[str]:
        return iter(self._resources)

    def get(self, resource_id: str) -> Resource:
        """Get a resource by id.

        Raises:
            ResourceNotFoundError: If the id is not in the graph
        """
        try:
            return self._resources[resource_id]
        except KeyError:
            raise ResourceNotFoundError(resource_id) from None

    def find(self, resource_id: str) -> Resource | None:
        """Get a resource by id, or None if absent."""
        return self._resources.get(resource_id)

    def set(self, resource_id: str, resource: Resource) -> None:
        """Insert or replace a resource."""
        self._resources[resource_id] = resource

    def remove(self, resource_id: str) -> None:
        """Remove a resource and its group membership. Missing ids are ignored."""
        if self._resources.pop(resource_id, None) is not None:
            logger.debug("Removed resource '%s'", resource_id)
        self._groups.pop(resource_id, None)

    def assign_group(self, group: str, resource_id: str) -> None:
        """Place a resource in a deployment group, replacing any previous group."""
        self._groups[resource_id] = group

    def group_of(self, resource_id: str) -> str | None:
        return self._groups.get(resource_id)

    def groups(self) -> dict[str, list[str]]:
        """Get resource ids per deployment group, in insertion order."""
        grouped: dict[str, list[str]] = defaultdict(list)
        for resource_id, group in self._groups.items():
            grouped[group].append(resource_id)
        return dict(grouped)

    def ids_of_type(self, resource_type: str) -> list[str]:
        return [rid for rid, res in self._resources.items() if res.type == resource_type]

    def add_dependency(self, resource_id: str, dependency_id: str) -> None:
        """Record that ``resource_id`` depends on ``dependency_id``.

        Edges keep insertion order and are recorded once.

        Raises:
            ResourceNotFoundError: If ``resource_id`` is not in the graph
        """
        resource = self.get(resource_id)
        if dependency_id not in resource.depends_on:
            resource.depends_on.append(dependency_id)

    def dependencies(self, resource_id: str) -> list[str]:
        return list(self.get(resource_id).depends_on)

    def dependents(self, resource_id: str) -> set[str]:
        return {rid for rid, res in self._resources.items() if resource_id in res.depends_on}

    def _edges(self) -> dict[str, set[str]]:
        # Only edges between resources present in the graph take part in ordering
        return {
            rid: {dep for dep in res.depends_on if dep in self._resources} for rid, res in self._resources.items()
        }

    def deployment_order(self) -> list[str]:
        """Compute a dependency-safe deployment order.

        Returns:
            Resource ids, dependencies first

        Raises:
            CycleError: If dependencies form a cycle
        """
        sorter = TopologicalSorter(self._edges())
        try:
            return list(sorter.static_order())
        except CycleError as e:
            logger.error("Cycle detected in resource dependencies: %s", e.args[1])
            raise

    def deployment_waves(self) -> list[set[str]]:
        """Group resources into waves that can be deployed together."""
        sorter = TopologicalSorter(self._edges())
        sorter.prepare()
        waves: list[set[str]] = []
        while sorter.is_active():
            ready = set(sorter.get_ready())
            waves.append(ready)
            sorter.done(*ready)
        return waves

    def to_template(self) -> dict[str, Any]:
        """Serialise resources as a CloudFormation ``Resources`` section."""
        return {"Resources": {rid: res.to_dict() for rid, res in self._resources.items()}}

    def stack_mapping(self) -> dict[str, str]:
        return dict(self._groups)

    @classmethod
    def from_template(cls, template: dict[str, Any], stack_mapping: dict[str, str] | None = None) -> ResourceGraph:
        """Build a graph from a template's ``Resources`` section and a stack mapping."""
        graph = cls()
        for resource_id, data in (template.get("Resources") or {}).items():
            graph.set(resource_id, Resource.from_dict(data))
        for resource_id, group in (stack_mapping or {}).items():
            graph.assign_group(group, resource_id)
        return graph

    def to_mermaid(self) -> str:
        """Generate Mermaid diagram of the dependency graph.

        Returns:
            Mermaid graph definition string
        """
        lines = ["graph TD"]
        edges = self._edges()

        for resource_id in self._resources:
            for dep in self._resources[resource_id].depends_on:
                if dep in edges[resource_id]:
                    lines.append(f"    {dep} --> {resource_id}")

        # Isolated nodes
        for resource_id in self._resources:
            if not edges[resource_id] and not self.dependents(resource_id):
                lines.append(f"    {resource_id}")

        return "\n".join(lines)

    def to_ascii(self) -> str:
        """Generate ASCII representation of deployment waves.

        Returns:
            ASCII art string showing resources per wave
        """
        lines: list[str] = []
        width = 60
        for i, wave in enumerate(self.deployment_waves()):
            if i > 0:
                lines.append("       │")
                lines.append("       ▼")
            lines.append(f"┌{'─' * width}┐")
            for resource_id in sorted(wave):
                group = self._groups.get(resource_id, "-")
                label = f"{resource_id} [{group}]"
                lines.append(f"│ {label:<{width - 2}} │")
            lines.append(f"└{'─' * width}┘")
        return "\n".join(lines)
