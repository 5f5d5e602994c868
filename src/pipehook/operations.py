"""The five standard model operations and their storage-layer naming.

The model transformer names its single-step resolvers ``<Op><Entity>Resolver``
and its GraphQL fields ``create<Entity>``, ``get<Entity>``, ``list<Entities>``
and so on. These helpers reproduce that convention so the compiler can locate
each resolver; callers with different conventions pass explicit overrides.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class ModelOperation(Enum):
    """Standard model operations, in compilation order."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    GET = "get"
    LIST = "list"

    @property
    def type_name(self) -> str:
        """Root type holding the operation's field."""
        if self in (ModelOperation.GET, ModelOperation.LIST):
            return "Query"
        return "Mutation"


@dataclass(frozen=True)
class OperationTarget:
    """One standard operation on one entity.

    Attributes:
        operation: Which standard operation
        type_name: Root type (Query or Mutation)
        field_name: GraphQL field name
        resolver_id: Id of the storage layer's single-step resolver
    """

    operation: ModelOperation
    type_name: str
    field_name: str
    resolver_id: str


def plurality(value: str) -> str:
    """Pluralise the trailing word of a field name.

    Covers the English suffix rules GraphQL model names run into; irregular
    plurals need an explicit field-name override.

    >>> plurality("listTodo")
    'listTodos'
    >>> plurality("listCategory")
    'listCategories'
    """
    if not value:
        return value
    if value.endswith("s") and not value.endswith("ss"):
        return value
    if re.search(r"[^aeiou]y$", value, flags=re.IGNORECASE):
        return value[:-1] + "ies"
    if re.search(r"(ss|x|z|ch|sh)$", value, flags=re.IGNORECASE):
        return value + "es"
    return value + "s"


def resolver_id(operation: ModelOperation, entity: str) -> str:
    """Id of the storage layer's resolver for ``operation`` on ``entity``.

    >>> resolver_id(ModelOperation.CREATE, "Todo")
    'CreateTodoResolver'
    """
    return f"{operation.value.capitalize()}{entity}Resolver"


def field_name(operation: ModelOperation, entity: str) -> str:
    name = f"{operation.value}{entity}"
    if operation is ModelOperation.LIST:
        return plurality(name)
    return name


def model_operations(entity: str, field_names: dict[ModelOperation, str] | None = None) -> list[OperationTarget]:
    """Build the five operation targets for an entity.

    Args:
        entity: Entity (GraphQL type) name
        field_names: Optional field-name overrides per operation

    Returns:
        Targets in the order create, update, delete, get, list
    """
    overrides = field_names or {}
    return [
        OperationTarget(
            operation=op,
            type_name=op.type_name,
            field_name=overrides.get(op, field_name(op, entity)),
            resolver_id=resolver_id(op, entity),
        )
        for op in ModelOperation
    ]
