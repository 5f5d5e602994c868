"""Exceptions raised while compiling @hook directives."""


class PipehookError(Exception):
    """Base class for all pipehook errors."""


class InvalidDirectiveError(PipehookError, ValueError):
    """Raised when an entity's directives cannot be compiled."""


class ResourceNotFoundError(PipehookError, KeyError):
    """Raised when a resource id is not present in the graph."""

    def __init__(self, resource_id: str) -> None:
        super().__init__(resource_id)
        self.resource_id = resource_id

    def __str__(self) -> str:
        return f"Resource '{self.resource_id}' not found in graph"


class MalformedResourceError(PipehookError, ValueError):
    """Raised when an upstream resource lacks the properties it must carry."""


class DocumentError(PipehookError, ValueError):
    """Raised when a compile request document cannot be read."""
