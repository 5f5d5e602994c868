"""Compile request documents and compiled output.

A compile request bundles the storage layer's output with the schema's
entities:

    template:       {Resources: {...}}
    stack_mapping:  {CreateTodoResolver: Todo, ...}
    hoisted:        {CreateTodoResolver: "<template text>"}
    entities:
      - name: Todo
        directives: {model: {}, hook: {name: auditlog, before: {create: true}}}

YAML and JSON are both accepted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from pipehook.directive import EntityDefinition
from pipehook.errors import DocumentError
from pipehook.pipeline import HoistedContentRegistry
from pipehook.resources.graph import ResourceGraph
from pipehook.transformer import CompilationArena

logger = logging.getLogger(__name__)


class CompileRequest(BaseModel):
    """Input of one compilation run."""

    template: dict[str, Any] = Field(default_factory=lambda: {"Resources": {}})
    stack_mapping: dict[str, str] = Field(default_factory=dict)
    hoisted: dict[str, str] = Field(default_factory=dict)
    entities: list[EntityDefinition] = Field(default_factory=list)

    def to_arena(self) -> CompilationArena:
        """Build a fresh arena holding this request's resources and hoisted content."""
        hoisted = HoistedContentRegistry()
        for resource_id, text in self.hoisted.items():
            hoisted.register_text(resource_id, text)
        return CompilationArena(
            graph=ResourceGraph.from_template(self.template, self.stack_mapping),
            hoisted=hoisted,
        )


def _read_structured(path: Path) -> Any:
    try:
        with path.open() as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise DocumentError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise DocumentError(f"Cannot parse {path}: {e}") from e


def load_request(path: Path) -> CompileRequest:
    """Load a compile request from a YAML or JSON file.

    Raises:
        DocumentError: If the file is unreadable or does not match the request shape
    """
    data = _read_structured(path)
    if not isinstance(data, dict):
        raise DocumentError(f"{path} must contain a mapping, got {type(data).__name__}")
    try:
        request = CompileRequest.model_validate(data)
    except ValidationError as e:
        raise DocumentError(f"Invalid compile request {path}: {e}") from e
    logger.debug(
        "Loaded %d entities and %d resources from %s",
        len(request.entities),
        len(request.template.get("Resources") or {}),
        path,
    )
    return request


def load_graph(path: Path) -> ResourceGraph:
    """Load compiled output (``Resources`` plus optional ``StackMapping``) into a graph."""
    data = _read_structured(path)
    if not isinstance(data, dict):
        raise DocumentError(f"{path} must contain a mapping, got {type(data).__name__}")
    return ResourceGraph.from_template(data, data.get("StackMapping") or {})


def dump_graph(graph: ResourceGraph) -> str:
    """Serialise a graph as compiled output JSON."""
    output = graph.to_template()
    output["StackMapping"] = graph.stack_mapping()
    return json.dumps(output, indent=2)
