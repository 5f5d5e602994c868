"""Resource graph, intrinsic functions and canonical ids."""

from pipehook.resources.graph import Resource, ResourceGraph
from pipehook.resources.ids import ResourceKind, canonical_id
from pipehook.resources.validation import validate_graph

__all__ = [
    "Resource",
    "ResourceGraph",
    "ResourceKind",
    "canonical_id",
    "validate_graph",
]
