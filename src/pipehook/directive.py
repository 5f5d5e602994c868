"""The @hook directive: definition, arguments and entity preconditions."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pipehook.errors import InvalidDirectiveError
from pipehook.operations import ModelOperation

HOOK_DIRECTIVE = "hook"
MODEL_DIRECTIVE = "model"

Stage = Literal["before", "after"]
STAGES: tuple[Stage, ...] = ("before", "after")

DIRECTIVE_DEFINITION = """\
directive @hook(
    name: String!
    before: HookMethodMap
    after: HookMethodMap
    region: String
) on OBJECT

input HookMethodMap {
    get: Boolean
    list: Boolean
    create: Boolean
    update: Boolean
    delete: Boolean
}
"""


class MethodMap(BaseModel):
    """Per-operation enable flags for one hook stage."""

    model_config = ConfigDict(extra="forbid")

    get: bool = False
    list: bool = False
    create: bool = False
    update: bool = False
    delete: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    def enabled(self, operation: ModelOperation) -> bool:
        return bool(getattr(self, operation.value))

    def any_enabled(self) -> bool:
        return any(self.enabled(op) for op in ModelOperation)


class HookDirective(BaseModel):
    """Arguments of one @hook directive.

    Attributes:
        name: Lambda function name, may contain a ``${env}`` placeholder
        region: Region of the function; None means the stack's region
        before: Operations that run the hook before the data step
        after: Operations that run the hook after the data step
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    region: str | None = None
    before: MethodMap = Field(default_factory=MethodMap)
    after: MethodMap = Field(default_factory=MethodMap)

    @field_validator("before", "after", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("region", mode="before")
    @classmethod
    def _blank_region_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def stage(self, stage: Stage) -> MethodMap:
        return self.before if stage == "before" else self.after

    @classmethod
    def from_arguments(cls, arguments: dict[str, Any] | None, entity: str = "") -> HookDirective:
        """Validate raw directive arguments.

        Raises:
            InvalidDirectiveError: If arguments are missing or malformed
        """
        try:
            return cls.model_validate(arguments or {})
        except ValidationError as e:
            where = f" on type '{entity}'" if entity else ""
            raise InvalidDirectiveError(f"Invalid @hook arguments{where}: {e}") from e


class EntityDefinition(BaseModel):
    """An object type and the directives attached to it.

    Attributes:
        name: Type name
        directives: Directive name to its argument map
        stack: Deployment group for this entity's pipelines (None: configured default)
        field_names: Optional GraphQL field-name overrides keyed by operation
    """

    name: str = Field(min_length=1)
    directives: dict[str, dict[str, Any] | None] = Field(default_factory=dict)
    stack: str | None = None
    field_names: dict[ModelOperation, str] = Field(default_factory=dict)

    def has_directive(self, name: str) -> bool:
        return name in self.directives

    def hook(self) -> HookDirective:
        """Parse this entity's @hook arguments.

        Raises:
            InvalidDirectiveError: If the entity has no valid @hook
        """
        if not self.has_directive(HOOK_DIRECTIVE):
            raise InvalidDirectiveError(f"Type '{self.name}' is not annotated with @hook.")
        return HookDirective.from_arguments(self.directives[HOOK_DIRECTIVE], self.name)


def validate_entity(entity: EntityDefinition) -> HookDirective:
    """Check the @model precondition and return the parsed @hook arguments.

    Raises:
        InvalidDirectiveError: If @model is missing or @hook is invalid
    """
    if not entity.has_directive(MODEL_DIRECTIVE):
        raise InvalidDirectiveError("Types annotated with @hook must also be annotated with @model.")
    return entity.hook()
